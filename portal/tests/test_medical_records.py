import pytest
from django.urls import reverse

from portal.access import Principal
from portal.exceptions import ConflictError
from portal.models import MedicalRecord, Prescription
from portal.services import medical_records

pytestmark = pytest.mark.django_db


def create_as(client, patient, **extra):
    payload = {'patient': patient.pk, 'diagnosis': 'flu', **extra}
    return client.post(reverse('record-list'), payload, format='json')


def test_doctor_creates_record_under_own_name(client_for, doctor, other_doctor, patient):
    # a supplied doctor id is ignored on the doctor path
    r = create_as(client_for(doctor.user), patient, doctor=str(other_doctor.pk))
    assert r.status_code == 201, r.data
    record = MedicalRecord.objects.get(pk=r.data['id'])
    assert record.doctor_id == doctor.pk


def test_second_create_by_same_doctor_conflicts_other_doctor_succeeds(client_for, doctor, other_doctor, patient):
    assert create_as(client_for(doctor.user), patient).status_code == 201
    assert create_as(client_for(other_doctor.user), patient).status_code == 201

    r = create_as(client_for(doctor.user), patient, diagnosis='flu again')
    assert r.status_code == 409
    assert r.data['error']['code'] == 'conflict'
    assert MedicalRecord.objects.filter(doctor=doctor, patient=patient).count() == 1


def test_service_conflict_for_duplicate_pair(doctor, patient):
    principal = Principal.from_user(doctor.user)
    medical_records.create_record_as_doctor(principal, doctor.user, {'patient': patient, 'diagnosis': 'flu'})
    with pytest.raises(ConflictError):
        medical_records.create_record_as_doctor(principal, doctor.user, {'patient': patient, 'diagnosis': 'cold'})


def test_admin_must_name_the_doctor(client_for, admin_user, doctor, patient):
    client = client_for(admin_user)
    assert create_as(client, patient).status_code == 400
    r = create_as(client, patient, doctor=str(doctor.pk))
    assert r.status_code == 201
    assert r.data['doctor'] == doctor.pk


def test_patient_sees_latest_own_record(client_for, doctor, other_doctor, patient):
    MedicalRecord.objects.create(patient=patient, doctor=doctor, diagnosis='old')
    latest = MedicalRecord.objects.create(patient=patient, doctor=other_doctor, diagnosis='new')
    r = client_for(patient.user).get(reverse('records-for-patient', kwargs={'patient_id': patient.pk}))
    assert r.status_code == 200
    assert r.data['id'] == latest.pk


def test_patient_denied_other_patient_with_or_without_records(client_for, doctor, patient, other_patient):
    client = client_for(patient.user)
    url = reverse('records-for-patient', kwargs={'patient_id': other_patient.pk})
    assert client.get(url).status_code == 403
    MedicalRecord.objects.create(patient=other_patient, doctor=doctor, diagnosis='secret')
    assert client.get(url).status_code == 403


def test_doctor_sees_only_own_record_for_patient(client_for, doctor, other_doctor, patient):
    mine = MedicalRecord.objects.create(patient=patient, doctor=doctor, diagnosis='mine')
    MedicalRecord.objects.create(patient=patient, doctor=other_doctor, diagnosis='theirs')
    url = reverse('records-for-patient', kwargs={'patient_id': patient.pk})
    r = client_for(doctor.user).get(url)
    assert r.status_code == 200
    assert r.data['id'] == mine.pk


def test_doctor_denied_when_patient_only_has_foreign_records(client_for, doctor, other_doctor, patient):
    MedicalRecord.objects.create(patient=patient, doctor=other_doctor, diagnosis='theirs')
    r = client_for(doctor.user).get(reverse('records-for-patient', kwargs={'patient_id': patient.pk}))
    assert r.status_code == 403


def test_no_records_is_not_found(client_for, admin_user, patient):
    r = client_for(admin_user).get(reverse('records-for-patient', kwargs={'patient_id': patient.pk}))
    assert r.status_code == 404
    assert 'No medical records found' in r.data['error']['message']


def test_nurse_sees_latest_record(client_for, nurse, doctor, patient):
    record = MedicalRecord.objects.create(patient=patient, doctor=doctor, diagnosis='x')
    r = client_for(nurse.user).get(reverse('records-for-patient', kwargs={'patient_id': patient.pk}))
    assert r.status_code == 200
    assert r.data['id'] == record.pk


def test_update_keeps_created_at(client_for, doctor, patient):
    record = MedicalRecord.objects.create(patient=patient, doctor=doctor, diagnosis='flu')
    created = record.created_at
    r = client_for(doctor.user).patch(
        reverse('record-detail', kwargs={'pk': record.pk}),
        {'diagnosis': 'pneumonia', 'created_at': '2000-01-01T00:00:00Z'}, format='json',
    )
    assert r.status_code == 200, r.data
    record.refresh_from_db()
    assert record.diagnosis == 'pneumonia'
    assert record.created_at == created


def test_update_by_other_doctor_forbidden(client_for, doctor, other_doctor, patient):
    record = MedicalRecord.objects.create(patient=patient, doctor=doctor, diagnosis='flu')
    r = client_for(other_doctor.user).patch(reverse('record-detail', kwargs={'pk': record.pk}),
                                            {'diagnosis': 'cold'}, format='json')
    assert r.status_code == 403


def test_update_with_mismatched_id_is_rejected(client_for, admin_user, doctor, patient):
    record = MedicalRecord.objects.create(patient=patient, doctor=doctor, diagnosis='flu')
    r = client_for(admin_user).patch(reverse('record-detail', kwargs={'pk': record.pk}),
                                     {'id': record.pk + 1, 'diagnosis': 'cold'}, format='json')
    assert r.status_code == 400
    assert r.data['error']['message'] == 'ID mismatch.'


def test_update_missing_record_is_404(client_for, admin_user):
    r = client_for(admin_user).patch(reverse('record-detail', kwargs={'pk': 999}), {'diagnosis': 'x'},
                                     format='json')
    assert r.status_code == 404


def test_doctor_prescribes_on_own_record_only(client_for, doctor, other_doctor, patient):
    record = MedicalRecord.objects.create(patient=patient, doctor=doctor, diagnosis='flu')
    payload = {'medical_record_id': record.pk, 'medication_name': 'Oseltamivir', 'dosage': '75mg'}

    r = client_for(other_doctor.user).post(reverse('prescription-for-record'), payload, format='json')
    assert r.status_code == 403

    r = client_for(doctor.user).post(reverse('prescription-for-record'), payload, format='json')
    assert r.status_code == 201, r.data
    assert Prescription.objects.filter(medical_record=record).count() == 1


def test_prescription_for_missing_record(client_for, doctor):
    payload = {'medical_record_id': 12345, 'medication_name': 'X', 'dosage': '1'}
    r = client_for(doctor.user).post(reverse('prescription-for-record'), payload, format='json')
    assert r.status_code == 404
    assert r.data['error']['message'] == 'Medical record not found.'


def test_edit_medical_cannot_move_prescription(client_for, doctor, patient, other_patient):
    record = MedicalRecord.objects.create(patient=patient, doctor=doctor, diagnosis='flu')
    elsewhere = MedicalRecord.objects.create(patient=other_patient, doctor=doctor, diagnosis='cold')
    item = Prescription.objects.create(medical_record=record, medication_name='A', dosage='1')
    r = client_for(doctor.user).put(reverse('prescription-edit-medical', kwargs={'pk': item.pk}),
                                    {'medical_record': elsewhere.pk, 'dosage': '2'}, format='json')
    assert r.status_code == 200, r.data
    item.refresh_from_db()
    assert item.medical_record_id == record.pk
    assert item.dosage == '2'


def test_record_prescriptions_follow_record_visibility(client_for, doctor, patient, other_patient):
    record = MedicalRecord.objects.create(patient=patient, doctor=doctor, diagnosis='flu')
    Prescription.objects.create(medical_record=record, medication_name='A', dosage='1')
    url = reverse('record-prescriptions', kwargs={'pk': record.pk})
    assert len(client_for(patient.user).get(url).data) == 1
    assert client_for(other_patient.user).get(url).status_code == 403


def test_doctor_lists_authored_records(client_for, doctor, other_doctor, patient):
    MedicalRecord.objects.create(patient=patient, doctor=doctor, diagnosis='mine')
    MedicalRecord.objects.create(patient=patient, doctor=other_doctor, diagnosis='theirs')
    r = client_for(doctor.user).get(reverse('records-by-me'))
    assert [row['diagnosis'] for row in r.data] == ['mine']


def test_doctor_cannot_move_record_onto_patient_they_already_have(client_for, doctor, patient, other_patient):
    client = client_for(doctor.user)
    assert create_as(client, patient).status_code == 201
    second = create_as(client, other_patient).data['id']

    r = client.patch(reverse('record-detail', kwargs={'pk': second}), {'patient': patient.pk}, format='json')
    assert r.status_code == 409
    assert MedicalRecord.objects.filter(doctor=doctor, patient=patient).count() == 1
    assert MedicalRecord.objects.get(pk=second).patient_id == other_patient.pk


def test_doctor_may_move_record_to_free_patient(client_for, doctor, patient, other_patient):
    client = client_for(doctor.user)
    record = create_as(client, patient).data['id']
    r = client.patch(reverse('record-detail', kwargs={'pk': record}), {'patient': other_patient.pk}, format='json')
    assert r.status_code == 200, r.data
    assert MedicalRecord.objects.get(pk=record).patient_id == other_patient.pk


def test_admin_create_refuses_duplicate_pair(client_for, admin_user, doctor, patient):
    client = client_for(admin_user)
    assert create_as(client, patient, doctor=str(doctor.pk)).status_code == 201
    r = create_as(client, patient, doctor=str(doctor.pk))
    assert r.status_code == 409
    assert MedicalRecord.objects.filter(doctor=doctor, patient=patient).count() == 1


def test_admin_cannot_reassign_record_onto_existing_pair(client_for, admin_user, doctor, other_doctor, patient):
    MedicalRecord.objects.create(patient=patient, doctor=doctor, diagnosis='first')
    theirs = MedicalRecord.objects.create(patient=patient, doctor=other_doctor, diagnosis='second')
    r = client_for(admin_user).patch(reverse('record-detail', kwargs={'pk': theirs.pk}),
                                     {'doctor': str(doctor.pk)}, format='json')
    assert r.status_code == 409
    theirs.refresh_from_db()
    assert theirs.doctor_id == other_doctor.pk


def test_record_round_trip(admin_user, doctor, patient):
    record = medical_records.create_record(admin_user, {'doctor': doctor, 'patient': patient,
                                                        'diagnosis': 'asthma', 'notes': 'inhaler'})
    fetched = medical_records.get_record(record.pk)
    assert (fetched.doctor_id, fetched.patient_id) == (doctor.pk, patient.pk)
    assert (fetched.diagnosis, fetched.notes) == ('asthma', 'inhaler')
    assert fetched.created_at is not None
