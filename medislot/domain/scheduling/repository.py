"""Scheduling repository - Database operations for schedules and appointments"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, Doctor, Patient, Payment, Schedule


class ScheduleRepository:
    """Repository for schedule database operations"""

    @staticmethod
    def get_schedules(db: Session, doctor_id: int) -> list[Schedule]:
        """Get all schedule rows for a doctor"""
        return db.query(Schedule).filter(Schedule.doctor_id == doctor_id).all()

    @staticmethod
    def get_schedule(
        db: Session, doctor_id: int, day: str, for_update: bool = False
    ) -> Optional[Schedule]:
        """Get the schedule row of one weekday, optionally row-locked"""
        query = db.query(Schedule).filter(Schedule.doctor_id == doctor_id, Schedule.day == day)
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def add_schedules(db: Session, schedules: list[Schedule]) -> None:
        """Stage schedule rows without committing"""
        db.add_all(schedules)

    @staticmethod
    def update_schedule(db: Session, schedule: Schedule, **updates) -> Schedule:
        """Update a schedule with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(schedule, key):
                setattr(schedule, key, value)

        db.commit()
        db.refresh(schedule)
        return schedule


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def get_doctor(db: Session, doctor_id: int) -> Optional[Doctor]:
        """Get a doctor by ID"""
        return db.query(Doctor).filter(Doctor.id == doctor_id).first()

    @staticmethod
    def get_patient(db: Session, patient_id: int) -> Optional[Patient]:
        """Get a patient by ID"""
        return db.query(Patient).filter(Patient.id == patient_id).first()

    @staticmethod
    def get_appointment(db: Session, appointment_id: int) -> Optional[Appointment]:
        """Get an appointment with its payment"""
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.payment))
            .filter(Appointment.id == appointment_id)
            .first()
        )

    @staticmethod
    def get_booked_slots(
        db: Session,
        doctor_id: int,
        appointment_date: date,
        exclude_appointment_id: Optional[int] = None,
    ) -> set[str]:
        """Slots already taken for a doctor on a date"""
        query = db.query(Appointment.slot).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date == appointment_date,
        )
        if exclude_appointment_id is not None:
            query = query.filter(Appointment.id != exclude_appointment_id)
        return {row.slot for row in query.all()}

    @staticmethod
    def get_future_appointment_dates(db: Session, doctor_id: int, from_date: date) -> list[date]:
        """Distinct appointment dates for a doctor on or after from_date"""
        rows = (
            db.query(Appointment.appointment_date)
            .filter(
                Appointment.doctor_id == doctor_id,
                Appointment.appointment_date >= from_date,
            )
            .distinct()
            .all()
        )
        return [row.appointment_date for row in rows]

    @staticmethod
    def list_appointments(
        db: Session,
        doctor_id: Optional[int] = None,
        patient_id: Optional[int] = None,
    ) -> list[Appointment]:
        """List appointments, newest date first, slots ascending within a day"""
        query = db.query(Appointment).options(joinedload(Appointment.payment))

        if doctor_id is not None:
            query = query.filter(Appointment.doctor_id == doctor_id)
        if patient_id is not None:
            query = query.filter(Appointment.patient_id == patient_id)

        return query.order_by(Appointment.appointment_date.desc(), Appointment.slot.asc()).all()

    @staticmethod
    def create_appointment(
        db: Session,
        patient_id: int,
        doctor_id: int,
        appointment_date: date,
        slot: str,
        status: str,
        amount: float,
        payment_status: str,
    ) -> Appointment:
        """Insert an appointment with its companion payment in one transaction"""
        appointment = Appointment(
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_date=appointment_date,
            slot=slot,
            status=status,
        )
        appointment.payment = Payment(amount=amount, status=payment_status)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def update_appointment(db: Session, appointment: Appointment, **updates) -> Appointment:
        """Update an appointment with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(appointment, key):
                setattr(appointment, key, value)

        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def delete_appointment(db: Session, appointment: Appointment) -> None:
        """Delete an appointment (its payment goes with it)"""
        db.delete(appointment)
        db.commit()
