# aquadash/schemas/employees.py
from aquadash.schemas.common import ApiModel


class EmployeeRole(ApiModel):
    id: str | None = None
    name: str = ""


class Employee(ApiModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str | None = None
    phone: str | None = None
    status: str | None = None
    role: EmployeeRole | None = None
    profileImg: str | None = None
    createdAt: str | None = None
    updatedAt: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
