"""Application context wiring the option store to its collaborators."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from sqlmodel import Session

from .config import BaseConfig
from .domain.repositories import ObjectCache, OptionRepository
from .infra.cache import create_object_cache
from .infra.database import create_db_engine, create_session_factory
from .infra.repositories import SQLModelOptionRepository
from .services.hooks import HookRegistry
from .services.install import maybe_install
from .services.options import PROTECTED_OPTIONS, OptionStore
from .services.sanitization import SettingsErrors
from .services.settings import SettingsRegistry
from .services.transients import TransientStore


@dataclass
class OptionsContext:
    """Everything one process needs to read and write global options.

    Hooks, settings and collected settings errors start empty and are only
    changed through their own APIs.
    """

    config: BaseConfig
    engine: Any
    session_factory: Callable[[], Session]
    repository: OptionRepository
    cache: ObjectCache
    hooks: HookRegistry
    settings_errors: SettingsErrors
    options: OptionStore
    transients: TransientStore
    settings: SettingsRegistry
    clock: Callable[[], float] = time.time
    protected_names: frozenset[str] = field(default=PROTECTED_OPTIONS)

    def install(self) -> bool:
        return maybe_install(self.engine, self.options)


def create_options_context(
    config: Optional[BaseConfig] = None,
    *,
    engine: Any = None,
    cache: Optional[ObjectCache] = None,
    clock: Optional[Callable[[], float]] = None,
    protected_names: frozenset[str] = PROTECTED_OPTIONS,
    install: bool = True,
) -> OptionsContext:
    """Create and initialize the options context."""

    if config is None:
        config = BaseConfig()
    clock = clock or time.time

    if engine is None:
        engine = create_db_engine(config)
    session_factory = create_session_factory(engine)
    repository = SQLModelOptionRepository(session_factory)

    if cache is None:
        cache = create_object_cache(config, clock=clock)

    hooks = HookRegistry()
    settings_errors = SettingsErrors()
    options = OptionStore(
        repository,
        cache,
        hooks,
        settings_errors=settings_errors,
        protected_names=protected_names,
    )
    transients = TransientStore(options, cache, hooks, clock=clock)
    settings = SettingsRegistry(hooks)

    context = OptionsContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        repository=repository,
        cache=cache,
        hooks=hooks,
        settings_errors=settings_errors,
        options=options,
        transients=transients,
        settings=settings,
        clock=clock,
        protected_names=frozenset(protected_names),
    )
    if install:
        context.install()
    return context


__all__ = ["OptionsContext", "create_options_context"]
