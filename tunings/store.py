"""
Tuning store: owner of all tuning banks and of the tuning selection.

Manages:
- Load / migrate / save of the banks (background thread)
- Sort policy (12 ET pinned to the top of every bank)
- Selection (bank, tuning) and pushes to the synth frequency table
- Tuning-changed notifications for UI code
"""
import logging
import random
import threading
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from synth.frequency_table import FrequencyTable
from synth.parameters import FREQUENCY_A4, SynthParameters
from tunings.config import TuningSettings
from tunings.constants import (
    BANK_COUNT,
    CURATED_BANK_INDEX,
    CURATED_BANK_NAME,
    USER_BANK_INDEX,
    USER_BANK_NAME,
)
from tunings.models import SortType, Tuning, TuningBank, sort_tunings
from tunings.persistence import TuningsFile
from tunings.presets import factory_tunings

logger = logging.getLogger(__name__)

TuningChangedCallback = Callable[[], None]
Dispatcher = Callable[[Callable[[], None]], None]


class LoadState(Enum):
    """Phases of TuningStore.load()."""
    UNLOADED = "unloaded"
    LOADING = "loading"
    FRESH_INSTALL = "fresh_install"
    MIGRATING = "migrating"
    LOADED = "loaded"
    READY = "ready"


class TuningStore:
    """
    Tuning model for the synth.

    The store is the single writer of its banks. Until load() has finished
    (is_ready), queries return safe defaults and mutations are no-ops.
    Consumers always receive copies of master sets.

    The load save runs on the worker thread. After that, set_tuning(),
    add_tunings() and set_sort_type() save synchronously on the calling
    thread; call them off the audio/UI thread if disk latency matters.

    Changes to the A4 parameter are forwarded to the frequency table.
    """

    def __init__(
        self,
        storage: TuningsFile,
        frequency_table: FrequencyTable,
        parameters: SynthParameters,
        sort_type: SortType = SortType.NOTE_COUNT,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            storage: Tunings file in the data directory
            frequency_table: Table receiving the selected master set
            parameters: Synth parameters (A4 reference pitch)
            sort_type: Initial sort for both banks
            rng: Random source for random_tuning()
        """
        self._storage = storage
        self._frequency_table = frequency_table
        self._parameters = parameters
        self._sort_type = sort_type
        self._rng = rng if rng is not None else random.Random()

        self._banks: List[TuningBank] = []
        self._selected_bank_index = CURATED_BANK_INDEX
        self._selected_tuning_index = 0
        self._state = LoadState.UNLOADED
        self._ready = threading.Event()
        self._load_thread: Optional[threading.Thread] = None
        self._observers: List[TuningChangedCallback] = []

        # Last tuning sent to the frequency table (shared with other apps)
        default = Tuning.default()
        self._tuning_name = default.name
        self._master_set = default.master_set

        self.last_save_error: Optional[Exception] = None

        self._frequency_table.set_reference_pitch(parameters.get(FREQUENCY_A4.name))
        parameters.add_listener(self._on_parameter_changed)

    @classmethod
    def from_settings(
        cls,
        settings: TuningSettings,
        frequency_table: FrequencyTable,
        parameters: SynthParameters,
        rng: Optional[random.Random] = None,
    ) -> "TuningStore":
        """Create a store for the data directory and sort named in settings."""
        return cls(
            storage=TuningsFile(settings.data_path),
            frequency_table=frequency_table,
            parameters=parameters,
            sort_type=settings.sort,
            rng=rng,
        )

    # State

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    @property
    def sort_type(self) -> SortType:
        return self._sort_type

    @property
    def banks(self) -> Tuple[TuningBank, ...]:
        return tuple(self._banks)

    @property
    def bank(self) -> Optional[TuningBank]:
        """Currently selected bank (None before load)."""
        if not self.is_ready:
            return None
        return self._banks[self._selected_bank_index]

    @property
    def selected_bank_index(self) -> int:
        return self._selected_bank_index

    @property
    def selected_tuning_index(self) -> int:
        return self._selected_tuning_index

    @property
    def tuning_name(self) -> str:
        return self._tuning_name

    @property
    def master_set(self) -> List[float]:
        return list(self._master_set)

    def _on_parameter_changed(self, name: str, value: float):
        if name == FREQUENCY_A4.name:
            self._frequency_table.set_reference_pitch(value)

    # Notifications

    def subscribe(self, callback: TuningChangedCallback) -> Callable[[], None]:
        """
        Register a tuning-changed callback.

        Returns:
            Function that removes the callback again
        """
        self._observers.append(callback)

        def unsubscribe():
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def _notify(self):
        for callback in list(self._observers):
            callback()

    # Load / save

    def load(
        self,
        on_complete: Optional[Callable[[], None]] = None,
        dispatch: Optional[Dispatcher] = None,
    ) -> Optional[threading.Thread]:
        """
        Load banks on a background thread.

        on_complete runs exactly once, after the banks are populated, sorted,
        saved and selected. With `dispatch` it is handed to that function
        (e.g. to run on the UI thread); otherwise it runs on the worker.

        Returns:
            The worker thread, or None if load() was already called
        """
        if self._state != LoadState.UNLOADED:
            logger.warning("Tunings load already started (state: %s)", self._state.value)
            return None

        self._state = LoadState.LOADING
        self._load_thread = threading.Thread(
            target=self._load_worker,
            args=(on_complete, dispatch),
            name="tunings-load",
            daemon=True,
        )
        self._load_thread.start()
        return self._load_thread

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until load() has finished. Returns False on timeout."""
        return self._ready.wait(timeout)

    def _load_worker(self, on_complete, dispatch):
        try:
            banks = [self.sort_tunings(b) for b in self._populate()]
        except (TypeError, ValueError) as e:
            logger.error("Invalid tuning banks, regenerating factory banks: %s", e)
            self._state = LoadState.FRESH_INSTALL
            banks = [self.sort_tunings(b) for b in self.factory_banks()]
        self._banks = banks
        self._save()

        if len(banks[USER_BANK_INDEX]) >= 1:
            self._selected_bank_index = USER_BANK_INDEX
        else:
            self._selected_bank_index = CURATED_BANK_INDEX
        self._selected_tuning_index = 0

        self._state = LoadState.READY
        self._ready.set()
        logger.info("Tunings ready: %s", ", ".join(f"{b.name} ({len(b)})" for b in banks))

        if on_complete is not None:
            if dispatch is not None:
                dispatch(on_complete)
            else:
                on_complete()

    def _populate(self) -> List[TuningBank]:
        """Read, migrate or generate the banks."""
        version = self._storage.schema_version()

        if version == 1:
            self._state = LoadState.LOADED
            try:
                banks = self._storage.load()
            except (OSError, ValueError) as e:
                logger.error("Failed to load tuning banks, regenerating factory banks: %s", e)
                self._state = LoadState.FRESH_INSTALL
                return self.factory_banks()
            if not banks:
                logger.warning("Tunings file holds no banks, regenerating factory banks")
                self._state = LoadState.FRESH_INSTALL
                return self.factory_banks()
            defaults = self.factory_banks() if len(banks) < BANK_COUNT else []
            return banks + defaults[len(banks):]

        if version == 0:
            # v0 -> v1 is a full replace: legacy tunings are discarded
            self._state = LoadState.MIGRATING
            logger.warning("Replacing legacy tunings file %s with factory banks",
                           self._storage.legacy_path)
            return self.factory_banks()

        self._state = LoadState.FRESH_INSTALL
        logger.info("No tunings file found, generating factory banks")
        return self.factory_banks()

    @staticmethod
    def factory_banks() -> List[TuningBank]:
        """Curated bank with every factory preset plus an empty User bank."""
        curated = TuningBank(
            name=CURATED_BANK_NAME,
            is_editable=False,
            order=CURATED_BANK_INDEX,
            tunings=tuple(factory_tunings()),
        )
        user = TuningBank(name=USER_BANK_NAME, is_editable=True, order=USER_BANK_INDEX)
        return [curated, user]

    def _save(self) -> bool:
        """Persist the banks. Failures are logged and kept in last_save_error."""
        try:
            self._storage.save(self._banks)
        except (OSError, ValueError) as e:
            logger.error("Error saving tuning banks: %s", e)
            self.last_save_error = e
            return False
        self.last_save_error = None
        return True

    # Sorting

    def sort_tunings(self, bank: TuningBank) -> TuningBank:
        """Sort a bank with the active sort type (12 ET first)."""
        return sort_tunings(bank, self._sort_type)

    def set_sort_type(self, sort_type: SortType) -> bool:
        """Change the sort, re-sort both banks and keep the selected tuning selected."""
        if not self.is_ready:
            return False
        self._sort_type = sort_type
        for i, bank in enumerate(self._banks):
            self._replace_bank(i, self.sort_tunings(bank))
        self._save()
        return True

    def _replace_bank(self, index: int, bank: TuningBank):
        """Swap in a new version of a bank, following the selected tuning."""
        if index == self._selected_bank_index:
            selected = self._banks[index].tunings[self._selected_tuning_index]
            new_index = bank.index_of(selected)
            self._selected_tuning_index = new_index if new_index is not None else 0
        self._banks[index] = bank

    # Selection / mutation

    def _push(self, tuning: Tuning):
        """Send a tuning to the frequency table."""
        self._tuning_name = tuning.name
        self._master_set = tuning.master_set
        self._frequency_table.tuning_table_from_frequencies(list(tuning.master_set))

    def set_tuning(self, name: Optional[str], master_set: Optional[Iterable[float]]) -> Tuple[Optional[int], bool]:
        """
        Add a tuning to the User bank (unless already there) and select it.

        Args:
            name: Tuning name
            master_set: Ratios of the tuning

        Returns:
            (index of the new tuning in the User bank, True) when inserted,
            (None, False) for duplicates and invalid input
        """
        if not self.is_ready:
            return None, False
        if not isinstance(name, str) or not name or master_set is None:
            return None, False
        try:
            ratios = tuple(float(f) for f in master_set)
            if not ratios:
                return None, False
            tuning = Tuning(name=name, master_set=ratios)
        except (TypeError, ValueError) as e:
            logger.warning("Rejected tuning '%s': %s", name, e)
            return None, False

        index = None
        refresh = False
        user_bank = self._banks[USER_BANK_INDEX]
        selected_index = user_bank.index_of(tuning)

        if selected_index is None:
            self._replace_bank(USER_BANK_INDEX,
                               self.sort_tunings(user_bank.with_tunings(user_bank.tunings + (tuning,))))
            selected_index = self._banks[USER_BANK_INDEX].index_of(tuning)
            if selected_index is not None:
                index = selected_index
                refresh = True
                self._save()
            else:
                logger.error("Error inserting/sorting new tuning '%s'", name)
        else:
            # TODO: let the UI tell the user the tuning already exists
            logger.debug("Tuning '%s' already in the User bank", name)

        if selected_index is not None:
            self._selected_bank_index = USER_BANK_INDEX
            self._selected_tuning_index = selected_index

        self._push(tuning)
        self._notify()
        return index, refresh

    def add_tunings(self, tunings: Iterable[Tuning]) -> int:
        """
        Bulk-add tunings (e.g. an imported bank) to the User bank.

        Duplicates of existing entries are skipped.

        Returns:
            Number of tunings inserted
        """
        if not self.is_ready:
            return 0
        user_bank = self._banks[USER_BANK_INDEX]
        known = {t.key for t in user_bank.tunings}
        new = []
        for tuning in tunings:
            if tuning.key not in known:
                known.add(tuning.key)
                new.append(tuning)
        if not new:
            return 0

        self._replace_bank(USER_BANK_INDEX,
                           self.sort_tunings(user_bank.with_tunings(user_bank.tunings + tuple(new))))
        self._save()
        self._notify()
        logger.info("Added %d tunings to the %s bank", len(new), user_bank.name)
        return len(new)

    def select_tuning(self, index: int) -> bool:
        """Select a tuning of the selected bank. Out-of-range indices are ignored."""
        if not self.is_ready:
            return False
        tunings = self._banks[self._selected_bank_index].tunings
        if not 0 <= index < len(tunings):
            return False
        self._selected_tuning_index = index
        self._push(tunings[index])
        self._notify()
        return True

    def select_bank(self, index: int) -> bool:
        """Select the Curated (0) or User (1) bank. Other indices are ignored."""
        if not self.is_ready:
            return False
        if not 0 <= index < BANK_COUNT:
            return False
        self._selected_bank_index = index
        if self._selected_tuning_index >= len(self._banks[index].tunings):
            self._selected_tuning_index = 0
        return True

    def reset_tuning(self) -> Optional[int]:
        """
        Back to 12 ET (Curated bank, index 0) and the default A4.

        Returns:
            Selected tuning index (0), or None before load
        """
        if not self.is_ready:
            return None
        self._selected_bank_index = CURATED_BANK_INDEX
        self._selected_tuning_index = 0
        self._push(self._banks[CURATED_BANK_INDEX].tunings[0])
        self._parameters.set(FREQUENCY_A4.name, self._parameters.get_default(FREQUENCY_A4.name))
        self._notify()
        return 0

    def random_tuning(self) -> Optional[int]:
        """
        Select a random tuning of the selected bank.

        Returns:
            Selected tuning index, or None before load
        """
        if not self.is_ready:
            return None
        tunings = self._banks[self._selected_bank_index].tunings
        index = self._rng.randrange(len(tunings))
        self._selected_tuning_index = index
        self._push(tunings[index])
        self._notify()
        return index

    def get_tuning(self, index: int) -> Tuple[str, List[float]]:
        """
        Name and master set of a tuning of the selected bank.

        Raises:
            IndexError: If index is out of range
        """
        if not self.is_ready:
            return "", [1.0]
        tunings = self._banks[self._selected_bank_index].tunings
        if not 0 <= index < len(tunings):
            raise IndexError(f"Tuning index {index} out of range (0-{len(tunings) - 1})")
        tuning = tunings[index]
        return tuning.name, list(tuning.master_set)

    def current_tuning(self) -> Tuple[str, List[float]]:
        """Name and master set of the tuning last sent to the frequency table."""
        if not self.is_ready:
            return "", [1.0]
        return self._tuning_name, list(self._master_set)

    def tuning_count(self) -> int:
        """Number of tunings in the selected bank."""
        if not self.is_ready:
            return 0
        return len(self._banks[self._selected_bank_index].tunings)

    def bank_names(self) -> List[str]:
        if not self.is_ready:
            return []
        return [b.name for b in self._banks]
