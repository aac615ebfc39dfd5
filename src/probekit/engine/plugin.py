"""
Probe plugin facade.

Wires the probe engine into a host application: validates the plugin
configuration, compiles the probes, prepares the measure storage, registers
the content filters and starts the probe timers. The host then forwards its
events through ``handle``, using ``hooks`` to know which events matter.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from ..config.validators import validate_app_config
from ..matching.base import Matcher
from ..matching.simple import SimpleMatcher
from ..models.config import AppConfig
from ..models.probes import ProbeDefinition, ProbeType
from ..notifications import NotificationSink
from ..probes.compiler import compile_probes
from ..probes.reservoir import ReservoirSampler
from ..probes.router import build_hooks, register_filters
from ..storage.base import MeasureStorage
from ..storage.factory import create_storage
from ..validation import ErrorSeverity, handle_storage_error
from .aggregation import ProbeEngine
from .provisioning import ensure_measure_collections, ensure_measure_index

logger = logging.getLogger(__name__)

_CONTENT_TYPES = (ProbeType.WATCHER, ProbeType.SAMPLER)


class ProbePlugin:
    """
    Host-facing entry point of the probe engine.

    In dummy mode (requested, or no valid probe configured) the plugin
    exposes no hooks and ignores every event.
    """

    def __init__(self):
        self.dummy = True
        self.hooks: Dict[str, List[str]] = {}
        self.probes: Dict[str, ProbeDefinition] = {}
        self.index = ""
        self.config: Optional[AppConfig] = None
        self.storage: Optional[MeasureStorage] = None
        self.engine: Optional[ProbeEngine] = None

    async def init(
        self,
        config: Union[AppConfig, Mapping[str, Any]],
        matcher: Optional[Matcher] = None,
        notifier: Optional[NotificationSink] = None,
        storage: Optional[MeasureStorage] = None,
        dummy: bool = False,
        strict: bool = False,
        seed: Optional[int] = None,
    ) -> "ProbePlugin":
        """
        Initialize the plugin and start the probes.

        Args:
            config: Validated configuration, or a raw configuration mapping
            matcher: Matcher for watcher and sampler filters. Defaults to
                the in-process SimpleMatcher.
            notifier: Receives a notification per flushed measure
            storage: Measure storage. Built from the storage settings when
                not provided.
            dummy: Start in dummy mode
            strict: Fail on the first invalid probe instead of dropping it
            seed: Seed of the sampler probes random generator

        Returns:
            The plugin itself

        Raises:
            ValidationError: If the plugin configuration is invalid
        """
        if isinstance(config, AppConfig):
            app_config = config
        else:
            app_config = validate_app_config(config)
        self.config = app_config

        probes = compile_probes(app_config.probes, strict=strict)

        self.dummy = dummy or not probes
        if self.dummy:
            logger.info("Probe plugin started in dummy mode")
            return self

        self.index = app_config.plugin.storage_index
        self.storage = storage or create_storage(
            app_config.storage.format,
            app_config.plugin.databases[0],
            app_config.storage.compression,
        )

        matcher = matcher or SimpleMatcher()
        self.probes = await register_filters(probes, matcher)
        self.hooks = build_hooks(self.probes)
        self.engine = ProbeEngine(
            self.probes,
            self.storage,
            self.index,
            matcher=matcher,
            notifier=notifier,
            sampler=ReservoirSampler(seed),
        )

        try:
            await ensure_measure_index(self.storage, self.index)
            await ensure_measure_collections(self.storage, self.index, self.probes)
        except Exception as e:
            handle_storage_error(
                e, f"provisioning index {self.index}",
                severity=ErrorSeverity.CRITICAL, reraise=True, logger=logger
            )

        self.engine.start()
        return self

    async def handle(self, event: str, payload: Any = None) -> None:
        """
        Forward a host event to the probe families hooked on it.

        Args:
            event: Host event name
            payload: Document carried by the event, for watcher and sampler
                probes
        """
        if self.dummy or self.engine is None:
            return

        probe_types = [ProbeType(value) for value in self.hooks.get(event, [])]
        content_types = [t for t in probe_types if t in _CONTENT_TYPES]

        for probe_type in probe_types:
            if probe_type not in _CONTENT_TYPES:
                await self.engine.dispatch(probe_type, event)

        if payload is None or not content_types:
            return
        if len(content_types) == len(_CONTENT_TYPES):
            await self.engine.on_document(payload)
        else:
            await self.engine.dispatch(content_types[0], event, payload)

    async def shutdown(self, drain: bool = True) -> None:
        """Stop the probe timers, optionally wait for pending writes, release storage."""
        if self.engine is not None:
            self.engine.stop()
            if drain:
                await self.engine.drain()
        if self.storage is not None:
            await self.storage.close()
        logger.info("Probe plugin stopped")
