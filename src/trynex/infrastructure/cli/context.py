"""Shared state handed to every CLI command through ``click.Context.obj``."""

from __future__ import annotations

from dataclasses import dataclass

import click

from trynex.infrastructure.config import Settings


@dataclass(frozen=True)
class CliContext:
    settings: Settings
    offline: bool = False


pass_cli_context = click.make_pass_decorator(CliContext)
