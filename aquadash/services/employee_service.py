# aquadash/services/employee_service.py
from typing import Any, Optional

from aquadash.schemas.employees import Employee
from aquadash.services.base import CrudService, form_fields


class EmployeeService(CrudService[Employee]):
    """
    /employees - create and update are multipart so a profile image can go
    along with the fields (form field `profileImg`).
    """
    path = "/employees"
    model = Employee
    noun = "employee"
    plural = "employees"

    def create(self, fields: dict[str, Any], profile_img: Optional[tuple] = None) -> Employee:
        files = {"profileImg": profile_img} if profile_img else None
        body = self.api.post(self.path, data=form_fields(fields), files=files, fallback="Failed to create employee")
        return self._one(body)

    def update(self, id: str, fields: dict[str, Any], profile_img: Optional[tuple] = None) -> Employee:
        files = {"profileImg": profile_img} if profile_img else None
        body = self.api.put(f"{self.path}/{id}", data=form_fields(fields), files=files, fallback="Failed to update employee")
        return self._one(body)
