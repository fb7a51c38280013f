from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import List

import typer
from rich.console import Console
from rich.table import Table

from adapters.records import translate_records
from config import SETTINGS, SUPPORTED_LANGUAGES
from translator.context import TranslationContext
from translator.factory import build_translator
from utils.cache import TranslationCache
from utils.lang import detect_language, normalize_language, other_language
from utils.logging_config import configure_logging
from utils.storage import JSONFileStorage

app = typer.Typer(add_completion=False)
console = Console()
# Notices, progress and detection logs stay off stdout so output can be piped.
err_console = Console(stderr=True)


def _run_async(coro):
    return asyncio.run(coro)


def _notify(title: str, description: str) -> None:
    err_console.print(f"[yellow]{title}:[/yellow] {description}")


def _storage() -> JSONFileStorage:
    return JSONFileStorage(SETTINGS.storage_path)


def _resolve_target(target: str | None, texts: List[str]) -> str | None:
    if target is None:
        return None
    if target.lower() == "auto":
        detected = detect_language(texts)
        if detected:
            err_console.log(f"Detected source language: {detected}")
        resolved = other_language("bn" if detected == "bn" else "en")
        err_console.log(f"Translating to {resolved}")
        return resolved
    if target not in SUPPORTED_LANGUAGES:
        raise typer.BadParameter(f"target must be one of {', '.join(SUPPORTED_LANGUAGES)} or auto")
    return target


@app.command(help="Translate one or more strings into the site language or --target")
def translate(
    texts: List[str] = typer.Argument(...),
    target: str | None = typer.Option(None, "--target", "-t", help="bn, en or auto; defaults to the saved site language"),
    engine: str | None = typer.Option(None, "--engine", "-e", help="function or chat"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    configure_logging(level="DEBUG" if verbose else "WARNING")
    context = TranslationContext.create(build_translator(engine), storage=_storage(), notifier=_notify)
    resolved = _resolve_target(target, texts)

    async def runner() -> List[str]:
        async with context:
            return await context.translate_batch(texts, resolved)

    for translated in _run_async(runner()):
        console.print(translated)


@app.command(help="Translate text fields of a JSON list of records")
def records(
    input: Path = typer.Argument(..., exists=True, readable=True),
    field: List[str] = typer.Option(..., "--field", "-f", help="Field to translate; repeatable"),
    output: Path | None = typer.Option(None, "--output", "-o"),
    target: str | None = typer.Option(None, "--target", "-t"),
    engine: str | None = typer.Option(None, "--engine", "-e"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also write debug logs to this file"),
) -> None:
    configure_logging(log_file, level="WARNING")
    items = json.loads(input.read_text(encoding="utf-8"))
    if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
        raise typer.BadParameter("input must be a JSON array of objects")

    context = TranslationContext.create(build_translator(engine), storage=_storage(), notifier=_notify)
    samples = [item[name] for item in items for name in field if isinstance(item.get(name), str)]
    resolved = _resolve_target(target, samples)

    async def runner():
        async with context:
            with err_console.status(f"Translating {len(items)} records"):
                return await translate_records(context, items, field, target_lang=resolved)

    translated = _run_async(runner())
    payload = json.dumps(translated, ensure_ascii=False, indent=2)
    if output:
        output.write_text(payload, encoding="utf-8")
        err_console.print(f"Saved translated records to {output}")
    elif console.is_terminal:
        console.print_json(payload)
    else:
        typer.echo(payload)


@app.command(help="Show or set the saved site language")
def language(code: str | None = typer.Argument(None, help="en or bn")) -> None:
    storage = _storage()
    if code is None:
        console.print(normalize_language(storage.get_item(SETTINGS.translation.language_key)))
        return
    if code not in SUPPORTED_LANGUAGES:
        raise typer.BadParameter(f"language must be one of {', '.join(SUPPORTED_LANGUAGES)}")
    storage.set_item(SETTINGS.translation.language_key, code)
    console.print(f"Site language set to {code}")


@app.command("cache-stats", help="Count live cached translations per language")
def cache_stats() -> None:
    cache = TranslationCache(_storage())
    cache.load()
    table = Table("Language", "Entries")
    for lang, count in cache.stats().items():
        table.add_row(lang, str(count))
    console.print(table)


@app.command("cache-clear", help="Drop every cached translation")
def cache_clear() -> None:
    cache = TranslationCache(_storage())
    cache.clear()
    console.print("Translation cache cleared")


if __name__ == "__main__":
    app()
