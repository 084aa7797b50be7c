from clinicsched.stores.memory import (
    InMemoryAppointmentStore,
    InMemoryClinicScheduleStore,
    InMemoryPractitionerDirectory,
)
from clinicsched.stores.protocols import AppointmentStore, ClinicScheduleStore, PractitionerDirectory

__all__ = [
    "AppointmentStore",
    "ClinicScheduleStore",
    "PractitionerDirectory",
    "InMemoryAppointmentStore",
    "InMemoryClinicScheduleStore",
    "InMemoryPractitionerDirectory",
]
