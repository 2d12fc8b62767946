"""
Access decisions exercised on plain values; no request or database.
"""
from datetime import datetime, timedelta, timezone as dt_timezone

import pytest

from portal import access
from portal.access import AppointmentRef, PatientRecords, Principal, RecordRef
from portal.exceptions import AccessDenied

T0 = datetime(2026, 10, 1, 9, 0, tzinfo=dt_timezone.utc)

ADMIN = Principal(user_id=1, role=access.ROLE_ADMIN)
NURSE = Principal(user_id=2, role=access.ROLE_NURSE, nurse_id='n-1')
D1 = Principal(user_id=10, role=access.ROLE_DOCTOR, doctor_id='d-1')
D2 = Principal(user_id=11, role=access.ROLE_DOCTOR, doctor_id='d-2')
ORPHAN_DOCTOR = Principal(user_id=12, role=access.ROLE_DOCTOR)
P5 = Principal(user_id=20, role=access.ROLE_PATIENT, patient_id=5)


def records_for(patient_id, *specs):
    """``specs`` are ``(id, doctor_id, minutes_after_T0)``."""
    return PatientRecords(
        patient_id=patient_id,
        records=[RecordRef(id=i, doctor_id=d, patient_id=patient_id, created_at=T0 + timedelta(minutes=m))
                 for i, d, m in specs],
    )


class TestViewPatientRecords:
    def test_patient_gets_latest_own_record(self):
        target = records_for(5, (1, 'd-1', 0), (2, 'd-2', 30), (3, 'd-1', 10))
        decision = access.resolve(P5, access.VIEW_PATIENT_RECORDS, target)
        assert decision.outcome == access.ALLOW
        assert decision.selected == 2

    def test_patient_denied_for_other_patient_with_records(self):
        target = records_for(6, (7, 'd-1', 0))
        assert not access.resolve(P5, access.VIEW_PATIENT_RECORDS, target).allowed

    def test_patient_denied_for_other_patient_without_records(self):
        assert not access.resolve(P5, access.VIEW_PATIENT_RECORDS, records_for(6)).allowed

    def test_patient_without_profile_is_denied(self):
        nobody = Principal(user_id=21, role=access.ROLE_PATIENT)
        assert not access.resolve(nobody, access.VIEW_PATIENT_RECORDS, records_for(5, (1, 'd-1', 0))).allowed

    def test_own_patient_without_records_selects_nothing(self):
        decision = access.resolve(P5, access.VIEW_PATIENT_RECORDS, records_for(5))
        assert decision.allowed
        assert decision.selected is None

    def test_doctor_sees_only_own_record(self):
        target = records_for(5, (1, 'd-1', 0), (2, 'd-2', 30))
        decision = access.resolve(D1, access.VIEW_PATIENT_RECORDS, target)
        assert decision.outcome == access.SCOPED
        assert decision.scope == {'doctor_id': 'd-1'}
        assert decision.selected == 1

    def test_doctor_denied_when_only_other_doctors_records_exist(self):
        target = records_for(5, (2, 'd-2', 30))
        decision = access.resolve(D1, access.VIEW_PATIENT_RECORDS, target)
        assert decision.outcome == access.DENY

    def test_doctor_without_profile_denied(self):
        target = records_for(5, (1, 'd-1', 0))
        assert not access.resolve(ORPHAN_DOCTOR, access.VIEW_PATIENT_RECORDS, target).allowed

    def test_doctor_with_no_records_gets_empty_selection(self):
        decision = access.resolve(D1, access.VIEW_PATIENT_RECORDS, records_for(5))
        assert decision.allowed
        assert decision.selected is None

    @pytest.mark.parametrize('principal', [ADMIN, NURSE])
    def test_elevated_roles_see_latest_record(self, principal):
        target = records_for(5, (1, 'd-1', 0), (2, 'd-2', 30))
        decision = access.resolve(principal, access.VIEW_PATIENT_RECORDS, target)
        assert decision.outcome == access.ALLOW
        assert decision.selected == 2

    def test_timestamp_tie_is_stable(self):
        target = records_for(5, (4, 'd-1', 0), (9, 'd-2', 0))
        first = access.resolve(ADMIN, access.VIEW_PATIENT_RECORDS, target).selected
        again = access.resolve(ADMIN, access.VIEW_PATIENT_RECORDS, target).selected
        assert first == again == 9


class TestRecordActions:
    record = RecordRef(id=1, doctor_id='d-1', patient_id=5, created_at=T0)

    def test_author_may_update(self):
        assert access.resolve(D1, access.UPDATE_RECORD, self.record).allowed

    def test_other_doctor_may_not_update_or_prescribe(self):
        assert not access.resolve(D2, access.UPDATE_RECORD, self.record).allowed
        assert not access.resolve(D2, access.MANAGE_PRESCRIPTIONS, self.record).allowed

    def test_admin_may_update(self):
        assert access.resolve(ADMIN, access.UPDATE_RECORD, self.record).allowed

    def test_patient_may_read_own_record_but_not_update(self):
        assert access.resolve(P5, access.VIEW_RECORD, self.record).allowed
        assert not access.resolve(P5, access.UPDATE_RECORD, self.record).allowed

    def test_nurse_reads_but_does_not_edit(self):
        assert access.resolve(NURSE, access.VIEW_RECORD, self.record).allowed
        assert not access.resolve(NURSE, access.MANAGE_PRESCRIPTIONS, self.record).allowed


class TestCreateRecordAsDoctor:
    def test_doctor_is_scoped_to_own_profile(self):
        decision = access.resolve(D1, access.CREATE_RECORD_AS_DOCTOR)
        assert decision.outcome == access.SCOPED
        assert decision.scope == {'doctor_id': 'd-1'}

    def test_doctor_without_profile_denied(self):
        with pytest.raises(AccessDenied):
            access.resolve(ORPHAN_DOCTOR, access.CREATE_RECORD_AS_DOCTOR).require()

    def test_admin_allowed_unscoped(self):
        assert access.resolve(ADMIN, access.CREATE_RECORD_AS_DOCTOR).outcome == access.ALLOW

    @pytest.mark.parametrize('principal', [NURSE, P5])
    def test_other_roles_denied(self, principal):
        assert not access.resolve(principal, access.CREATE_RECORD_AS_DOCTOR).allowed


class TestPatientsAndAppointments:
    def test_patient_listing_redirects_to_own_record(self):
        decision = access.resolve(P5, access.LIST_PATIENTS)
        assert decision.outcome == access.DENY
        assert decision.selected == 5
        with pytest.raises(AccessDenied) as exc:
            decision.require()
        assert exc.value.target == 5

    def test_doctor_patient_listing_is_scoped_by_user(self):
        decision = access.resolve(D1, access.LIST_PATIENTS)
        assert decision.scope == {'doctor_user_id': 10}

    def test_appointment_scopes(self):
        assert access.resolve(ADMIN, access.LIST_APPOINTMENTS).outcome == access.ALLOW
        assert access.resolve(D1, access.LIST_APPOINTMENTS).scope == {'doctor__user_id': 10}
        assert access.resolve(P5, access.LIST_APPOINTMENTS).scope == {'patient__user_id': 20}

    def test_view_appointment_by_participants_only(self):
        ref = AppointmentRef(doctor_user_id=10, patient_user_id=20)
        assert access.resolve(D1, access.VIEW_APPOINTMENT, ref).allowed
        assert access.resolve(P5, access.VIEW_APPOINTMENT, ref).allowed
        assert not access.resolve(D2, access.VIEW_APPOINTMENT, ref).allowed

    def test_unknown_action_is_rejected(self):
        with pytest.raises(ValueError):
            access.resolve(ADMIN, 'records.shred')
