from building_overrides.host import FixedClassifier
from building_overrides.overrides import Category, OverrideStore, SelectionController
from building_overrides.overrides.audit import OverrideAuditLog


def test_controller_records_save_and_delete(temp_db, store_path):
    audit = OverrideAuditLog()
    controller = SelectionController(OverrideStore(store_path), FixedClassifier(Category.WORKPLACE), audit=audit)
    controller.on_selection_changed("office1")
    controller.on_save_requested("20")
    controller.on_save_requested("25")
    controller.on_delete_requested()
    entries = audit.history("office1")
    assert [(e.action, e.old_value, e.new_value) for e in entries] == [
        ("delete", 25, None),
        ("save", 20, 25),
        ("save", None, 20),
    ]
    assert all(e.category is Category.WORKPLACE for e in entries)


def test_invalid_save_is_not_audited(temp_db, store_path):
    audit = OverrideAuditLog()
    controller = SelectionController(OverrideStore(store_path), FixedClassifier(Category.RESIDENTIAL), audit=audit)
    controller.on_selection_changed("house1")
    controller.on_save_requested("nope")
    assert audit.history() == []


def test_history_filters_by_building(temp_db):
    audit = OverrideAuditLog()
    audit.record("house1", Category.RESIDENTIAL, "save", None, 5)
    audit.record("office1", Category.WORKPLACE, "save", None, 20)
    assert [e.entity_name for e in audit.history("house1")] == ["house1"]
    assert len(audit.history()) == 2
