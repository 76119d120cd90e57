"""Database models."""

from sqlalchemy import MetaData

from app.models.appointments import appointments
from app.models.appointments import metadata as appointments_metadata
from app.models.doctor_schedules import doctor_schedules
from app.models.doctor_schedules import metadata as doctor_schedules_metadata
from app.models.users import metadata as users_metadata
from app.models.users import users

# Combined metadata for create_all / drop_all
metadata = MetaData()
for _source in (users_metadata, appointments_metadata, doctor_schedules_metadata):
    for _table in _source.tables.values():
        _table.to_metadata(metadata)

__all__ = [
    "appointments",
    "doctor_schedules",
    "metadata",
    "users",
]
