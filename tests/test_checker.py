"""
Unit tests for the consistency checker.

The checker is pure, so these build snapshots by hand.
"""

from archival.checker import INACTIVE_ANCESTOR, MISSING_PARENT, Violation, check
from archival.snapshot import Snapshot
from domain import (
    ConsultationDTO,
    EntityRef,
    EntityType,
    MedicalHistoryDTO,
    PatientDTO,
    PrescriptionDTO,
    RepresentativeDTO,
)


def tree(patient=True, history=True, consultation=True, prescription=True, representative=True):
    return Snapshot.from_records([
        PatientDTO(id=1, full_name="Ana Perez", is_active=patient),
        MedicalHistoryDTO(id=10, patient_id=1, is_active=history),
        RepresentativeDTO(id=20, patient_id=1, full_name="Luis Perez", is_active=representative),
        ConsultationDTO(id=30, medical_history_id=10, is_active=consultation),
        PrescriptionDTO(id=40, medical_history_id=10, consultation_id=30, is_active=prescription),
    ])


class TestCheck:
    """Tests for check()."""

    def test_all_active_is_consistent(self):
        assert check(tree()) == []

    def test_all_archived_is_consistent(self):
        snapshot = tree(False, False, False, False, False)
        assert check(snapshot) == []

    def test_archived_leaves_under_active_patient_are_fine(self):
        assert check(tree(consultation=False, representative=False)) == []

    def test_active_leaf_under_archived_patient(self):
        """The nearest archived ancestor is reported."""
        violations = check(tree(patient=False, history=False, representative=False, prescription=False))
        assert violations == [
            Violation(EntityRef(EntityType.CONSULTATION, 30), EntityRef(EntityType.MEDICAL_HISTORY, 10)),
        ]

    def test_every_offending_node_is_reported(self):
        violations = check(tree(patient=False))
        offenders = {v.node for v in violations}
        assert offenders == {
            EntityRef(EntityType.MEDICAL_HISTORY, 10),
            EntityRef(EntityType.REPRESENTATIVE, 20),
            EntityRef(EntityType.CONSULTATION, 30),
            EntityRef(EntityType.PRESCRIPTION, 40),
        }
        assert all(v.ancestor == EntityRef(EntityType.PATIENT, 1) for v in violations)
        assert all(v.kind == INACTIVE_ANCESTOR for v in violations)

    def test_archived_consultation_does_not_constrain_linked_prescription(self):
        """Prescription -> consultation is a reference, not an ancestry edge."""
        assert check(tree(consultation=False)) == []

    def test_detached_records_have_no_ancestors(self):
        snapshot = Snapshot.from_records([
            ConsultationDTO(id=1, medical_history_id=None),
            PrescriptionDTO(id=2, medical_history_id=None),
        ])
        assert check(snapshot) == []

    def test_missing_parent(self):
        snapshot = Snapshot.from_records([ConsultationDTO(id=5, medical_history_id=99)])
        violations = check(snapshot)
        assert len(violations) == 1
        assert violations[0].kind == MISSING_PARENT
        assert violations[0].ancestor == EntityRef(EntityType.MEDICAL_HISTORY, 99)

    def test_missing_parent_ignored_for_archived_node(self):
        snapshot = Snapshot.from_records([ConsultationDTO(id=5, medical_history_id=99, is_active=False)])
        assert check(snapshot) == []


class TestViolation:
    def test_str(self):
        v = Violation(EntityRef(EntityType.CONSULTATION, 3), EntityRef(EntityType.PATIENT, 1))
        assert str(v) == "consultation:3 is active under archived patient:1"

    def test_str_missing(self):
        v = Violation(EntityRef(EntityType.CONSULTATION, 3), EntityRef(EntityType.MEDICAL_HISTORY, 8),
                      MISSING_PARENT)
        assert "missing" in str(v)
