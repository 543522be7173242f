from app.models.academy import (  # noqa: F401
    AcademyClass,
    ClassFormat,
    ClassLevel,
    Exercise,
    Material,
    Professor,
    Student,
    class_materials,
    professor_classes,
)
