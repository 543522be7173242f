from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from app.models.academy import ClassFormat, ClassLevel


class PersonBase(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    dni: str = Field(min_length=1, max_length=20)
    email: EmailStr
    phone_number: str | None = Field(default=None, max_length=30)


class PersonUpdate(BaseModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone_number: str | None = Field(default=None, max_length=30)


class StudentCreate(PersonBase):
    enrolled: bool = False


class StudentUpdate(PersonUpdate):
    enrolled: bool | None = None


class StudentRead(PersonBase):
    model_config = ConfigDict(from_attributes=True)
    id: int
    enrolled: bool
    enrolled_at: datetime
    created_at: datetime


class ProfessorCreate(PersonBase):
    enabled: bool = True


class ProfessorUpdate(PersonUpdate):
    enabled: bool | None = None


class ProfessorRead(PersonBase):
    model_config = ConfigDict(from_attributes=True)
    id: int
    enabled: bool
    class_ids: list[int] = Field(default_factory=list)
    created_at: datetime


class AcademyClassBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    price: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    format: ClassFormat = ClassFormat.online
    level: ClassLevel = ClassLevel.beginner
    image: str | None = Field(default=None, max_length=500)


class AcademyClassCreate(AcademyClassBase):
    pass


class AcademyClassUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    format: ClassFormat | None = None
    level: ClassLevel | None = None
    image: str | None = Field(default=None, max_length=500)


class AcademyClassRead(AcademyClassBase):
    model_config = ConfigDict(from_attributes=True)
    id: int
    created_at: datetime


class MaterialBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    url: str = Field(min_length=1, max_length=500)


class MaterialCreate(MaterialBase):
    pass


class MaterialUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    url: str | None = Field(default=None, min_length=1, max_length=500)


class MaterialRead(MaterialBase):
    model_config = ConfigDict(from_attributes=True)
    id: int
    created_at: datetime


class ExerciseBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    statement: str = Field(min_length=1, max_length=2000)
    start_date: datetime
    end_date: datetime
    class_id: int | None = None

    @model_validator(mode="after")
    def _check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ExerciseCreate(ExerciseBase):
    pass


class ExerciseUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    statement: str | None = Field(default=None, min_length=1, max_length=2000)
    start_date: datetime | None = None
    end_date: datetime | None = None
    class_id: int | None = None


class ExerciseRead(ExerciseBase):
    model_config = ConfigDict(from_attributes=True)
    id: int
    created_at: datetime
