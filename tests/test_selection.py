import pytest

from building_overrides.exceptions import SelectionStateError
from building_overrides.host import FixedClassifier, ServiceClassifier
from building_overrides.overrides import (
    ActionError,
    Category,
    OverrideStore,
    SelectionController,
    SelectionState,
)
from building_overrides.overrides.selection import INVALID_VALUE_MESSAGE, parse_count


class CountingStore(OverrideStore):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.queries = 0

    def get(self, category, entity_name):
        self.queries += 1
        return super().get(category, entity_name)


@pytest.fixture()
def classifier():
    return ServiceClassifier(services={"house1": "residential", "office1": "office", "A": "commercial"})


def test_initial_state_is_no_selection(store_path, classifier):
    controller = SelectionController(OverrideStore(store_path), classifier)
    assert controller.state is SelectionState.NO_SELECTION
    assert controller.current_count() is None
    assert not controller.has_override()
    assert not controller.can_save
    assert not controller.can_delete


def test_selecting_building_with_override(store_path, classifier):
    store = OverrideStore(store_path)
    store.set(Category.RESIDENTIAL, "house1", 5)
    controller = SelectionController(store, classifier)
    assert controller.on_selection_changed("house1") is SelectionState.WITH_OVERRIDE
    assert controller.current_count() == 5
    assert controller.has_override()
    assert controller.can_save and controller.can_delete
    assert controller.label == "Homes"


def test_selecting_building_without_override(store_path, classifier):
    controller = SelectionController(OverrideStore(store_path), classifier)
    assert controller.on_selection_changed("office1") is SelectionState.WITHOUT_OVERRIDE
    assert controller.current_count() is None
    assert controller.can_save and not controller.can_delete
    assert controller.label == "Jobs"


@pytest.mark.parametrize("empty", [None, ""])
def test_empty_selection_returns_to_no_selection(store_path, classifier, empty):
    controller = SelectionController(OverrideStore(store_path), classifier)
    controller.on_selection_changed("house1")
    assert controller.on_selection_changed(empty) is SelectionState.NO_SELECTION
    assert controller.entity_name is None
    assert controller.label is None


def test_save_valid_text_sets_override(store_path, classifier):
    store = OverrideStore(store_path)
    controller = SelectionController(store, classifier)
    controller.on_selection_changed("office1")
    result = controller.on_save_requested(" 20 ")
    assert result.ok and result.count == 20
    assert controller.state is SelectionState.WITH_OVERRIDE
    assert controller.current_count() == 20
    assert OverrideStore.load(store_path).get(Category.WORKPLACE, "office1") == 20


def test_save_invalid_text_leaves_store_unchanged(store_path, classifier):
    store = OverrideStore(store_path)
    store.set(Category.RESIDENTIAL, "house1", 5)
    controller = SelectionController(store, classifier)
    controller.on_selection_changed("house1")
    result = controller.on_save_requested("abc")
    assert not result.ok
    assert result.error is ActionError.INVALID_INPUT
    assert result.message == INVALID_VALUE_MESSAGE
    assert controller.message == INVALID_VALUE_MESSAGE
    assert store.get(Category.RESIDENTIAL, "house1") == 5
    assert controller.state is SelectionState.WITH_OVERRIDE
    assert controller.current_count() == 5


def test_message_is_cleared_by_next_action(store_path, classifier):
    controller = SelectionController(OverrideStore(store_path), classifier)
    controller.on_selection_changed("house1")
    controller.on_save_requested("0")
    assert controller.message == INVALID_VALUE_MESSAGE
    assert controller.on_save_requested("4").ok
    assert controller.message is None


def test_delete_moves_to_without_override(store_path, classifier):
    store = OverrideStore(store_path)
    store.set(Category.WORKPLACE, "office1", 20)
    controller = SelectionController(store, classifier)
    controller.on_selection_changed("office1")
    assert controller.on_delete_requested().ok
    assert controller.state is SelectionState.WITHOUT_OVERRIDE
    assert controller.current_count() is None
    assert store.get(Category.WORKPLACE, "office1") is None


def test_delete_without_override_is_rejected(store_path, classifier):
    controller = SelectionController(OverrideStore(store_path), classifier)
    controller.on_selection_changed("office1")
    with pytest.raises(SelectionStateError):
        controller.on_delete_requested()


def test_actions_without_selection_are_rejected(store_path, classifier):
    controller = SelectionController(OverrideStore(store_path), classifier)
    with pytest.raises(SelectionStateError):
        controller.on_save_requested("5")
    with pytest.raises(SelectionStateError):
        controller.on_delete_requested()


def test_reselecting_same_building_does_not_query(store_path, classifier):
    store = CountingStore(store_path)
    store.set(Category.WORKPLACE, "A", 3)
    controller = SelectionController(store, classifier)
    controller.on_selection_changed("A")
    assert store.queries == 1
    assert controller.current_count() == 3
    controller.on_selection_changed("A")
    assert store.queries == 1
    controller.on_selection_changed("house1")
    controller.on_selection_changed("A")
    assert store.queries == 3


def test_save_failure_is_reported_without_state_change(unwritable_path):
    store = OverrideStore(unwritable_path)
    controller = SelectionController(store, FixedClassifier(Category.RESIDENTIAL))
    controller.on_selection_changed("house1")
    result = controller.on_save_requested("5")
    assert not result.ok
    assert result.error is ActionError.PERSISTENCE_FAILED
    assert str(unwritable_path) in result.message
    assert controller.state is SelectionState.WITHOUT_OVERRIDE
    assert store.get(Category.RESIDENTIAL, "house1") is None


def test_delete_failure_is_reported_without_state_change(store_path, unwritable_path):
    store = OverrideStore(store_path)
    store.set(Category.RESIDENTIAL, "house1", 5)
    controller = SelectionController(store, FixedClassifier(Category.RESIDENTIAL))
    controller.on_selection_changed("house1")
    store.path = unwritable_path
    result = controller.on_delete_requested()
    assert result.error is ActionError.PERSISTENCE_FAILED
    assert controller.state is SelectionState.WITH_OVERRIDE
    assert store.get(Category.RESIDENTIAL, "house1") == 5


@pytest.mark.parametrize(
    "text,expected",
    [("5", 5), (" 12 ", 12), ("+3", 3), ("0", None), ("-4", None), ("abc", None), ("", None), ("1_000", None), ("2.5", None), (None, None)],
)
def test_parse_count(text, expected):
    assert parse_count(text) == expected
