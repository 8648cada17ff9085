from pydantic import BaseModel


class PlatformStats(BaseModel):
    total_users: int
    total_schools: int
    total_enrollments: int
    active_qr_codes: int
