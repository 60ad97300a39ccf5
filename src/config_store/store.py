"""Live-reloading configuration store.

Binds a JSON or YAML file to a caller-owned model, keeps the model in
sync with the file by polling its metadata, and notifies a registered
callback when the file changes.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from config_store.binding import bind_model
from config_store.codec import Codec, DefaultCodec
from config_store.errors import ConfigFileNotFoundError, ConfigIOError, ConfigStoreError
from config_store.types import ConfigFormat, FileStamp, StoreOptions

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[bool], Any]


class ConfigStore:
    """Binds a configuration file to an in-memory model.

    Features:
    - Format detection from the file extension (json, yaml)
    - Keys missing from the file fall back to the model's initial values
    - Metadata-based (mtime + size) change detection on a polling thread
    - Single callback slot notified after each successful reload

    Every load first resets the model from the default snapshot taken at
    construction, then overlays the file content. A key removed from the
    file therefore reverts to its default instead of keeping a stale value.

    Thread-safety: load, save and the watermark are guarded by an internal
    lock. Callbacks run outside the lock on the polling thread; reading the
    model from the callback sees a fully updated state.
    """

    def __init__(
        self,
        path: str | Path,
        model: Any,
        codec: Codec | None = None,
        options: StoreOptions | None = None,
    ) -> None:
        """Initialize the store and load the file.

        Args:
            path: Path to the configuration file
            model: Mutable model holding default values; updated in place
            codec: Format codec (defaults to DefaultCodec)
            options: Store tunables (poll interval, missing file policy)

        Raises:
            InvalidModelKindError: If the model cannot be updated in place
            UnsupportedFormatError: If the extension is not json or yaml
            ConfigFileNotFoundError: If the file does not exist
            ConfigIOError: If the file cannot be read
            DecodeError: If the file content cannot be applied to the model
            EncodeError: If the model's defaults cannot be serialized
        """
        self._binding = bind_model(model)
        self._path = Path(path)
        self._format = ConfigFormat.from_path(self._path)
        self._options = options or StoreOptions()
        self._codec = codec or DefaultCodec(encoding=self._options.encoding)

        self._lock = threading.RLock()
        self._last_stamp: FileStamp | None = None
        self._on_change: ChangeCallback | None = None
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

        # Captured once, before any file content is applied
        self._default_snapshot = self._codec.encode(self._format, self._binding)

        self.load()

    def __repr__(self) -> str:
        return f"ConfigStore(path={str(self._path)!r}, format={self._format.value!r})"

    @property
    def path(self) -> Path:
        """Get config file path."""
        return self._path

    @property
    def format(self) -> ConfigFormat:
        """Get config file format."""
        return self._format

    @property
    def model(self) -> Any:
        """Get the bound model (the caller's own object)."""
        return self._binding.model

    @property
    def options(self) -> StoreOptions:
        """Get store options."""
        return self._options

    @property
    def default_snapshot(self) -> bytes:
        """Get the serialized defaults captured at construction."""
        return self._default_snapshot

    @property
    def last_stamp(self) -> FileStamp | None:
        """Get the file state observed by the last successful load."""
        with self._lock:
            return self._last_stamp

    @property
    def is_watching(self) -> bool:
        """Check if the polling thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def load(self) -> None:
        """Load the file into the model.

        The model is reset to its defaults, then keys present in the file
        are applied over them. The watermark only advances when the whole
        load succeeds, so a failed reload is retried by the watch loop.
        If decoding the file fails the model may already hold the defaults.

        Raises:
            ConfigFileNotFoundError: If the file does not exist and
                create_if_missing is off
            ConfigIOError: If the file cannot be read or created
            DecodeError: If the content cannot be applied to the model
        """
        with self._lock:
            if not self._path.exists():
                if not self._options.create_if_missing:
                    raise ConfigFileNotFoundError(self._path)
                self._create_empty()

            try:
                with open(self._path, "rb") as f:
                    blob = f.read()
                    stamp = FileStamp.from_stat(os.fstat(f.fileno()))
            except FileNotFoundError as e:
                raise ConfigFileNotFoundError(self._path) from e
            except OSError as e:
                raise ConfigIOError(f"Failed to read config: {e}", self._path) from e

            self._codec.decode(self._format, self._default_snapshot, self._binding, merge=False)
            if blob:
                self._codec.decode(self._format, blob, self._binding)

            self._last_stamp = stamp

        logger.info(f"Loaded config from {self._path}")

    def save(self) -> None:
        """Write the model to the file, replacing its content.

        The watermark is left alone, so an active watcher sees the write
        as a change and reloads it.

        Raises:
            EncodeError: If the model cannot be serialized
            ConfigIOError: If the file cannot be written
        """
        with self._lock:
            output = self._codec.encode(self._format, self._binding)
            try:
                with open(self._path, "wb") as f:
                    f.write(output)
            except OSError as e:
                raise ConfigIOError(f"Failed to write config: {e}", self._path) from e

        logger.info(f"Saved config to {self._path}")

    def watch(self, callback: ChangeCallback | None, invoke_immediately: bool = False) -> None:
        """Register the change callback and start watching.

        Replaces any previously registered callback. The callback receives
        False for the initial bind and True after a file change.

        Args:
            callback: Called with changed flag; None clears the slot
            invoke_immediately: Call callback(False) before returning
        """
        with self._lock:
            self._on_change = callback

        if callback is not None and invoke_immediately:
            callback(False)

        self.set_auto_reload(True)

    def stop_watch(self, timeout: float | None = None) -> None:
        """Stop watching for file changes.

        Wakes the polling thread and waits for it to exit. The registered
        callback is kept, so watching can be resumed with set_auto_reload.

        Args:
            timeout: Maximum seconds to wait for the thread (None waits)
        """
        self.set_auto_reload(False, timeout=timeout)

    def set_auto_reload(self, enabled: bool, timeout: float | None = None) -> None:
        """Start or stop the polling thread without touching the callback.

        Args:
            enabled: Whether the file should be watched
            timeout: Maximum seconds to wait for the thread when stopping
        """
        if enabled:
            self._start()
        else:
            self._stop(timeout)

    def emit_change(self, changed: bool = True) -> None:
        """Invoke the registered callback, if any."""
        with self._lock:
            callback = self._on_change
        if callback is not None:
            callback(changed)

    def _start(self) -> None:
        with self._lock:
            if self.is_watching:
                return

            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._watch_loop,
                args=(self._stop_event,),
                name=f"config-watch:{self._path.name}",
                daemon=True,
            )
            self._thread.start()

        logger.info(f"Config watcher started: {self._path}")

    def _stop(self, timeout: float | None) -> None:
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            self._stop_event.set()
            self._thread = None

        if thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("Config watcher stopped")

    def _watch_loop(self, stop_event: threading.Event) -> None:
        """Background loop to watch for changes."""
        while not stop_event.wait(self._options.poll_interval):
            try:
                self._check_for_changes()
            except Exception:
                logger.exception("Error checking config, will retry")

    def _check_for_changes(self) -> bool:
        """Reload the file if its metadata moved since the last load.

        Returns:
            True if the file was reloaded
        """
        try:
            stamp = FileStamp.from_stat(os.stat(self._path))
        except OSError as e:
            logger.debug(f"Cannot stat config, skipping tick: {e}")
            return False

        if stamp == self.last_stamp:
            return False

        logger.info(f"Config file changed, reloading: {self._path}")
        try:
            self.load()
        except ConfigStoreError as e:
            logger.error(f"Failed to reload config, will retry: {e}")
            return False

        try:
            self.emit_change(True)
        except Exception:
            logger.exception("Error in config change callback")

        return True

    def _create_empty(self) -> None:
        try:
            self._path.touch()
        except OSError as e:
            raise ConfigIOError(f"Failed to create config: {e}", self._path) from e
        logger.info(f"Created empty config file {self._path}")


def bind_config(
    path: str | Path,
    model: Any,
    on_change: ChangeCallback | None = None,
    **options: Any,
) -> ConfigStore:
    """Bind a config file to a model in one call.

    Intended for application startup: any construction error propagates
    and, left uncaught, aborts the process. When on_change is given the
    store starts watching and calls on_change(False) right away.

    Args:
        path: Path to the configuration file
        model: Mutable model holding default values
        on_change: Optional change callback
        **options: StoreOptions fields (poll_interval, create_if_missing, ...)

    Returns:
        The bound store
    """
    store = ConfigStore(path, model, options=StoreOptions.from_dict(options))
    if on_change is not None:
        store.watch(on_change, invoke_immediately=True)
    return store
