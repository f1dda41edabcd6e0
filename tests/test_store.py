"""Tests for TuningStore: load pipeline, selection and mutations."""
import threading

import numpy as np
import pytest

from synth.parameters import FREQUENCY_A4
from tunings.config import TuningSettings
from tunings.constants import (
    CURATED_BANK_INDEX,
    DEFAULT_TUNING_NAME,
    TUNINGS_FILENAME_V0,
    USER_BANK_INDEX,
)
from tunings.models import SortType, Tuning, TuningBank
from tunings.persistence import BankFile, TuningsFile
from tunings.presets import FACTORY_PRESETS
from tunings.store import LoadState, TuningStore

LOAD_TIMEOUT = 10.0
TWELVE_ET = [2 ** (k / 12) for k in range(12)]


def load(store):
    store.load()
    assert store.wait_until_ready(LOAD_TIMEOUT)
    return store


class TestLoad:

    def test_fresh_install(self, store, storage) -> None:
        assert store.is_ready
        assert store.state == LoadState.READY
        assert store.bank_names() == ["Curated", "User"]

        curated, user = store.banks
        assert len(curated) == len(FACTORY_PRESETS) + 1
        assert curated.tunings[0] == Tuning.default()
        assert not curated.is_editable
        assert user.tunings == (Tuning.default(),)
        assert user.is_editable

        # User bank always holds 12 ET, so it is selected on startup
        assert store.selected_bank_index == USER_BANK_INDEX
        assert store.selected_tuning_index == 0
        assert storage.schema_version() == 1
        assert store.last_save_error is None

    def test_callback_runs_once_after_ready(self, make_store) -> None:
        store = make_store()
        seen = []
        done = threading.Event()

        def on_complete():
            seen.append((store.is_ready, store.state, len(store.banks)))
            done.set()

        store.load(on_complete)
        assert done.wait(LOAD_TIMEOUT)
        assert seen == [(True, LoadState.READY, 2)]

    def test_callback_goes_through_dispatcher(self, make_store) -> None:
        store = make_store()
        calls = []
        queued = []

        thread = store.load(lambda: calls.append("done"), dispatch=queued.append)
        thread.join(LOAD_TIMEOUT)

        assert calls == []
        assert len(queued) == 1
        queued[0]()
        assert calls == ["done"]

    def test_second_load_is_ignored(self, store) -> None:
        assert store.load() is None

    def test_reload_keeps_user_tunings(self, store, make_store) -> None:
        store.set_tuning("Foo", [1.0, 1.5, 2.0])

        reloaded = load(make_store())
        names = [t.name for t in reloaded.banks[USER_BANK_INDEX].tunings]
        assert names == [DEFAULT_TUNING_NAME, "Foo"]
        assert reloaded.selected_bank_index == USER_BANK_INDEX
        assert reloaded.selected_tuning_index == 0

    def test_legacy_file_is_replaced_by_factory_banks(self, storage, make_store) -> None:
        storage.directory.mkdir(parents=True)
        storage.legacy_path.write_text(
            '[{"name": "Old", "order": 0, "isEditable": true, '
            '"tunings": [{"name": "Gone", "masterSet": [1.0, 1.1]}]}]')

        store = load(make_store())

        assert storage.legacy_path.name == TUNINGS_FILENAME_V0
        assert storage.schema_version() == 1
        assert store.bank_names() == ["Curated", "User"]
        assert store.banks[USER_BANK_INDEX].tunings == (Tuning.default(),)
        assert all(t.name != "Gone" for b in store.banks for t in b.tunings)
        assert store.selected_bank_index == USER_BANK_INDEX

    def test_corrupt_file_falls_back_to_factory(self, storage, make_store) -> None:
        storage.directory.mkdir(parents=True)
        storage.current_path.write_text("{corrupt")

        store = load(make_store())

        assert len(store.banks[CURATED_BANK_INDEX]) == len(FACTORY_PRESETS) + 1
        # Rewritten as a valid file
        assert len(storage.load()) == 2

    @pytest.mark.parametrize("text", [
        '[{"name": "Curated", "tunings": null}]',
        '[{"name": "Curated", "tunings": {"name": "x"}}]',
        '[{"name": 7, "tunings": []}]',
        '[{"name": "Curated", "order": "first", "tunings": []}]',
    ])
    def test_wrongly_typed_file_falls_back_to_factory(self, storage, make_store, text) -> None:
        storage.directory.mkdir(parents=True)
        storage.current_path.write_text(text)
        done = threading.Event()

        store = make_store()
        store.load(done.set)

        assert store.wait_until_ready(LOAD_TIMEOUT)
        assert done.wait(LOAD_TIMEOUT)
        assert store.state == LoadState.READY
        assert len(store.banks[CURATED_BANK_INDEX]) == len(FACTORY_PRESETS) + 1
        assert store.bank_names() == ["Curated", "User"]

    def test_tuning_with_non_string_name_is_skipped(self, storage, make_store) -> None:
        storage.directory.mkdir(parents=True)
        storage.current_path.write_text(
            '[{"name": "Curated", "tunings": ['
            '{"name": 5, "masterSet": [1.0, 1.5]}, '
            '{"name": "Kept", "masterSet": [1.0, 1.25]}]}]')

        store = load(make_store())

        names = [t.name for t in store.banks[CURATED_BANK_INDEX].tunings]
        assert names == [DEFAULT_TUNING_NAME, "Kept"]

    def test_single_bank_file_gets_user_bank(self, storage, make_store) -> None:
        storage.save([TuningBank(name="Curated", tunings=(Tuning(name="Only", master_set=(1.0, 1.5)),))])

        store = load(make_store())

        assert store.bank_names() == ["Curated", "User"]
        assert [t.name for t in store.banks[CURATED_BANK_INDEX].tunings] == [DEFAULT_TUNING_NAME, "Only"]

    def test_save_failure_is_recorded_not_raised(self, tmp_path, frequency_table, parameters) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = TuningStore(TuningsFile(blocker), frequency_table, parameters)

        load(store)

        assert store.is_ready
        assert isinstance(store.last_save_error, OSError)

    def test_from_settings(self, tmp_path, frequency_table, parameters) -> None:
        settings = TuningSettings(data_dir=str(tmp_path / "data"), sort_type="name")
        store = TuningStore.from_settings(settings, frequency_table, parameters)
        load(store)

        assert store.sort_type == SortType.NAME
        assert (tmp_path / "data" / "tunings_v1.json").exists()
        names = [t.sort_key(SortType.NAME) for t in store.banks[CURATED_BANK_INDEX].tunings[1:]]
        assert names == sorted(names)


class TestNotReady:

    def test_queries_and_mutations_are_no_ops(self, make_store, frequency_table) -> None:
        store = make_store()
        notified = []
        store.subscribe(lambda: notified.append(1))
        table_before = frequency_table.table.copy()

        assert not store.is_ready
        assert store.set_tuning("Foo", [1.0, 1.5]) == (None, False)
        assert store.add_tunings([Tuning(name="Foo", master_set=(1.0,))]) == 0
        assert store.select_tuning(0) is False
        assert store.select_bank(1) is False
        assert store.reset_tuning() is None
        assert store.random_tuning() is None
        assert store.set_sort_type(SortType.NAME) is False
        assert store.get_tuning(0) == ("", [1.0])
        assert store.current_tuning() == ("", [1.0])
        assert store.tuning_count() == 0
        assert store.bank_names() == []
        assert store.bank is None

        assert notified == []
        assert (frequency_table.table == table_before).all()


class TestSetTuning:

    def test_inserts_once(self, store) -> None:
        index, refresh = store.set_tuning("Foo", [1.0, 1.5, 2.0])
        user = store.banks[USER_BANK_INDEX]
        assert refresh is True
        assert index is not None and 0 <= index < len(user)
        assert user.tunings[index].name == "Foo"
        assert len(user) == 2

        assert store.set_tuning("Foo", [1.0, 1.5, 2.0]) == (None, False)
        assert len(store.banks[USER_BANK_INDEX]) == 2

    def test_selects_and_pushes(self, store, frequency_table) -> None:
        index, _ = store.set_tuning("Fifths", [1.0, 9 / 8, 3 / 2])
        assert store.selected_bank_index == USER_BANK_INDEX
        assert store.selected_tuning_index == index
        assert store.current_tuning() == ("Fifths", [1.0, 9 / 8, 3 / 2])
        assert store.tuning_name == "Fifths"
        assert frequency_table.npo == 3

    def test_duplicate_still_pushes_and_notifies(self, store, frequency_table) -> None:
        notified = []
        store.set_tuning("Foo", [1.0, 1.25])
        store.reset_tuning()
        store.subscribe(lambda: notified.append(1))

        assert store.set_tuning("Foo", [1.0, 1.25]) == (None, False)
        assert notified == [1]
        assert frequency_table.npo == 2
        assert store.selected_bank_index == USER_BANK_INDEX
        assert store.get_tuning(store.selected_tuning_index) == ("Foo", [1.0, 1.25])

    def test_same_name_different_set_is_new(self, store) -> None:
        store.set_tuning("Foo", [1.0, 1.25])
        _, refresh = store.set_tuning("Foo", [1.0, 1.5])
        assert refresh is True
        assert len(store.banks[USER_BANK_INDEX]) == 3

    @pytest.mark.parametrize("name,master_set", [
        ("", [1.0, 1.5]),
        (None, [1.0, 1.5]),
        ("Foo", []),
        ("Foo", None),
        ("Foo", [1.0, -1.5]),
        ("Foo", ["a", "b"]),
        ("Foo", 3),
        (5, [1.0, 1.5]),
        ("Foo", np.array([])),
    ])
    def test_invalid_input(self, store, name, master_set) -> None:
        notified = []
        store.subscribe(lambda: notified.append(1))
        assert store.set_tuning(name, master_set) == (None, False)
        assert len(store.banks[USER_BANK_INDEX]) == 1
        assert notified == []

    def test_accepts_numpy_arrays(self, store, frequency_table) -> None:
        index, refresh = store.set_tuning("Np", np.array([1.0, 1.5]))
        assert refresh is True
        assert store.get_tuning(index) == ("Np", [1.0, 1.5])
        assert frequency_table.npo == 2

        assert store.set_tuning("Np", np.array([1.0, 1.5])) == (None, False)

    def test_persists(self, store, storage) -> None:
        store.set_tuning("Foo", [1.0, 1.5])
        names = [t.name for t in storage.load()[USER_BANK_INDEX].tunings]
        assert "Foo" in names


class TestAddTunings:

    def test_imports_exported_bank(self, store, tmp_path) -> None:
        bank = TuningBank(name="Shared", tunings=(
            Tuning(name="A", master_set=(1.0, 1.5)),
            Tuning(name="B", master_set=(1.0, 1.25, 1.5)),
            Tuning.default(),
        ))
        path = BankFile.export_bank(bank, tmp_path / "shared")

        assert store.add_tunings(BankFile.import_bank(path).tunings) == 2
        assert len(store.banks[USER_BANK_INDEX]) == 3
        assert store.add_tunings(bank.tunings) == 0

    def test_keeps_selection_on_user_bank(self, store) -> None:
        store.set_tuning("Z", [1.0, 1.5])
        store.add_tunings([Tuning(name="A", master_set=(1.0, 1.25))])
        assert store.get_tuning(store.selected_tuning_index)[0] == "Z"


class TestSelection:

    @pytest.fixture(autouse=True)
    def on_curated_bank(self, store):
        assert store.select_bank(CURATED_BANK_INDEX)

    def test_select_tuning(self, store, frequency_table) -> None:
        notified = []
        store.subscribe(lambda: notified.append(1))

        assert store.select_tuning(5) is True
        name, master_set = store.get_tuning(5)
        assert store.selected_tuning_index == 5
        assert store.current_tuning() == (name, master_set)
        assert frequency_table.npo == len(master_set)
        assert notified == [1]

    def test_select_tuning_out_of_range(self, store) -> None:
        assert store.select_tuning(-1) is False
        assert store.select_tuning(store.tuning_count()) is False
        assert store.selected_tuning_index == 0

    def test_select_bank(self, store) -> None:
        store.select_tuning(20)
        assert store.select_bank(2) is False
        assert store.select_bank(-1) is False
        assert store.selected_bank_index == CURATED_BANK_INDEX

        assert store.select_bank(USER_BANK_INDEX) is True
        assert store.selected_bank_index == USER_BANK_INDEX
        # User bank only holds 12 ET
        assert store.selected_tuning_index == 0
        assert store.tuning_count() == 1

    def test_reset_tuning(self, store, parameters, frequency_table) -> None:
        store.set_tuning("Foo", [1.0, 1.5])
        parameters.set(FREQUENCY_A4.name, 452.0)
        assert frequency_table.reference_pitch == 452.0

        assert store.reset_tuning() == 0
        assert store.selected_bank_index == CURATED_BANK_INDEX
        assert store.selected_tuning_index == 0
        assert store.get_tuning(0) == (DEFAULT_TUNING_NAME, TWELVE_ET)
        assert store.current_tuning() == (DEFAULT_TUNING_NAME, TWELVE_ET)
        assert parameters.get(FREQUENCY_A4.name) == FREQUENCY_A4.default
        assert frequency_table.npo == 12
        assert frequency_table.frequency(69) == pytest.approx(FREQUENCY_A4.default)

    def test_random_tuning_stays_in_bank(self, store) -> None:
        for _ in range(50):
            index = store.random_tuning()
            assert 0 <= index < store.tuning_count()
            assert store.selected_tuning_index == index
            assert store.selected_bank_index == CURATED_BANK_INDEX

        store.set_tuning("Foo", [1.0, 1.5])
        for _ in range(20):
            assert store.random_tuning() in (0, 1)
            assert store.selected_bank_index == USER_BANK_INDEX

    def test_get_tuning_out_of_range(self, store) -> None:
        with pytest.raises(IndexError):
            store.get_tuning(store.tuning_count())
        with pytest.raises(IndexError):
            store.get_tuning(-1)

    def test_get_tuning_returns_copies(self, store) -> None:
        _, master_set = store.get_tuning(0)
        master_set.append(3.0)
        assert store.get_tuning(0)[1] == TWELVE_ET

    def test_set_sort_type_follows_selection(self, store) -> None:
        store.select_tuning(30)
        selected = store.get_tuning(30)

        assert store.set_sort_type(SortType.NAME) is True
        assert store.sort_type == SortType.NAME
        assert store.get_tuning(store.selected_tuning_index) == selected
        keys = [t.sort_key(SortType.NAME) for t in store.bank.tunings[1:]]
        assert keys == sorted(keys)


class TestReferencePitch:

    def test_store_applies_current_a4(self, make_store, parameters, frequency_table) -> None:
        parameters.set(FREQUENCY_A4.name, 432.0)
        make_store()
        assert frequency_table.frequency(69) == pytest.approx(432.0)

    def test_a4_changes_reach_frequency_table(self, store, parameters, frequency_table) -> None:
        store.set_tuning("Fifth", [1.0, 1.5])
        parameters.set(FREQUENCY_A4.name, 415.0)
        assert frequency_table.reference_pitch == 415.0
        assert frequency_table.npo == 2
        assert frequency_table.frequency(60) == pytest.approx(415.0 * 2 ** (-9 / 12))


class TestNotifications:

    @pytest.fixture(autouse=True)
    def on_curated_bank(self, store):
        assert store.select_bank(CURATED_BANK_INDEX)

    def test_fired_by_every_mutation(self, store) -> None:
        notified = []
        store.subscribe(lambda: notified.append(1))

        store.select_tuning(1)
        store.reset_tuning()
        store.random_tuning()
        store.set_tuning("Foo", [1.0, 1.5])
        assert len(notified) == 4

    def test_unsubscribe(self, store) -> None:
        notified = []
        unsubscribe = store.subscribe(lambda: notified.append(1))
        unsubscribe()
        unsubscribe()
        store.reset_tuning()
        assert notified == []
