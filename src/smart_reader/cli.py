"""CLI for the smart-reader article store."""

import asyncio
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, TypeVar

import typer
from loguru import logger

from smart_reader.config import resolve_data_file
from smart_reader.core.content.codec import parse_article_content
from smart_reader.core.diagnostics.chunking_check import run_chunking_check
from smart_reader.core.editing.editor import ContentEditor
from smart_reader.core.storage.blob import JsonFileBlobStore
from smart_reader.core.storage.store import ArticleStore
from smart_reader.errors import ArticleNotFoundError, ElementNotFoundError, StoreError
from smart_reader.logging_config import configure_logging
from smart_reader.models.article import ARTICLE_STATUSES, Article

app = typer.Typer(help="Smart reader: save articles and edit them element by element.")

T = TypeVar("T")

DataFileOption = Annotated[
    Path | None,
    typer.Option("--data-file", "-f", help="JSON data file (default: SMART_READER_DATA_FILE)"),
]
DryRunOption = Annotated[bool, typer.Option("--dry-run", help="Do not write anything")]


class _EchoNotifier:
    """Print editor notices to the terminal."""

    def notify(self, title: str, description: str, *, error: bool = False) -> None:
        typer.echo(f"{title}: {description}", err=error)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _run_with_store(
    data_file: Path | None,
    action: Callable[[ArticleStore], Awaitable[T]],
    *,
    dry_run: bool = False,
) -> T:
    """Open the store on data_file, run action, and map store errors to exit codes."""

    async def _run() -> T:
        blob = JsonFileBlobStore(data_file or resolve_data_file(), dry_run=dry_run)
        async with ArticleStore(blob) as store:
            return await action(store)

    try:
        return asyncio.run(_run())
    except ArticleNotFoundError as e:
        typer.echo(f"Article '{e.article_id}' not found.")
        raise typer.Exit(1) from e
    except ElementNotFoundError as e:
        typer.echo(f"Element '{e.element_id}' not found.")
        raise typer.Exit(1) from e
    except StoreError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e


@app.command(name="list")
def list_cmd(
    status: Annotated[
        str | None,
        typer.Option("--status", "-s", help="Only show read or unread articles"),
    ] = None,
    data_file: DataFileOption = None,
) -> None:
    """List saved articles."""
    if status is not None and status not in ARTICLE_STATUSES:
        typer.echo(f"Unknown status '{status}', expected one of: {', '.join(ARTICLE_STATUSES)}")
        raise typer.Exit(1)

    articles = _run_with_store(data_file, lambda store: store.load_articles())
    if status is not None:
        articles = [a for a in articles if a.status == status]

    typer.echo(f"{len(articles)} articles:\n")
    for a in articles:
        chunked = f", {len(a.content_chunk_ids)} chunks" if a.is_chunked else ""
        typer.echo(f"  [{a.status}] {a.title} ({a.domain}{chunked})")
        typer.echo(f"    added {a.added_at:%Y-%m-%d %H:%M}  id={a.id}")


@app.command()
def add(
    url: str = typer.Argument(..., help="Article URL"),
    content_file: Annotated[
        Path,
        typer.Option("--content-file", "-c", help="HTML file with the article body ('-' for stdin)"),
    ] = Path("-"),
    title: Annotated[str | None, typer.Option("--title", "-t", help="Article title")] = None,
    data_file: DataFileOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Save an article whose body was extracted elsewhere."""
    if str(content_file) == "-":
        content = sys.stdin.read()
    elif content_file.is_file():
        content = content_file.read_text(encoding="utf-8")
    else:
        typer.echo(f"Content file not found: {content_file}")
        raise typer.Exit(1)

    article = Article.create(url=url, title=title, content=content)
    _run_with_store(data_file, lambda store: store.add_article(article), dry_run=dry_run)
    typer.echo(f"Saved '{article.title}' ({len(content)} chars)")


@app.command()
def show(
    article_id: str = typer.Argument(..., help="Article ID"),
    raw_html: bool = typer.Option(False, "--html", help="Print the stored HTML instead"),
    data_file: DataFileOption = None,
) -> None:
    """Show an article's content elements."""
    article = _run_with_store(data_file, lambda store: store.get_article(article_id))
    if raw_html:
        typer.echo(article.content)
        return

    typer.echo(f"{article.title}\n{article.url}\n")
    for el in parse_article_content(article.content, base_url=article.url or None):
        marker = "*" if el.is_highlighted else " "
        if el.type == "image":
            typer.echo(f" {marker} {el.id:<16} image    src={el.src} alt={el.alt}")
        else:
            label = f"h{el.level}" if el.type == "heading" else el.type
            preview = " ".join(el.content.split())[:70]
            typer.echo(f" {marker} {el.id:<16} {label:<8} {preview}")


@app.command()
def status(
    article_id: str = typer.Argument(..., help="Article ID"),
    new_status: str = typer.Argument(..., help="read or unread"),
    data_file: DataFileOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Mark an article read or unread."""
    if new_status not in ARTICLE_STATUSES:
        typer.echo(f"Unknown status '{new_status}', expected one of: {', '.join(ARTICLE_STATUSES)}")
        raise typer.Exit(1)
    _run_with_store(
        data_file,
        lambda store: store.update_article_status(article_id, new_status),  # type: ignore[arg-type]
        dry_run=dry_run,
    )
    typer.echo(f"Article {article_id} marked {new_status}")


@app.command()
def delete(
    article_id: str = typer.Argument(..., help="Article ID"),
    data_file: DataFileOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Delete an article."""
    _run_with_store(data_file, lambda store: store.delete_article(article_id), dry_run=dry_run)
    typer.echo(f"Article {article_id} deleted")


async def _edit(
    store: ArticleStore,
    article_id: str,
    edit: Callable[[ContentEditor], Awaitable[object]],
) -> None:
    article = await store.get_article(article_id)
    editor = ContentEditor(store, article, notifier=_EchoNotifier())
    await edit(editor)


@app.command()
def highlight(
    article_id: str = typer.Argument(..., help="Article ID"),
    element_id: str = typer.Argument(..., help="Element ID (see 'show')"),
    data_file: DataFileOption = None,
) -> None:
    """Toggle the highlight of one element."""
    _run_with_store(
        data_file,
        lambda store: _edit(store, article_id, lambda ed: ed.toggle_highlight(element_id)),
    )


@app.command(name="delete-element")
def delete_element(
    article_id: str = typer.Argument(..., help="Article ID"),
    element_id: str = typer.Argument(..., help="Element ID (see 'show')"),
    data_file: DataFileOption = None,
) -> None:
    """Remove one element from an article's body."""
    _run_with_store(
        data_file,
        lambda store: _edit(store, article_id, lambda ed: ed.delete_element(element_id)),
    )


@app.command(name="delete-highlighted")
def delete_highlighted(
    article_id: str = typer.Argument(..., help="Article ID"),
    data_file: DataFileOption = None,
) -> None:
    """Remove every highlighted element from an article's body."""
    _run_with_store(
        data_file,
        lambda store: _edit(store, article_id, lambda ed: ed.delete_highlighted()),
    )


@app.command(name="clear-highlights")
def clear_highlights(
    article_id: str = typer.Argument(..., help="Article ID"),
    data_file: DataFileOption = None,
) -> None:
    """Remove every highlight from an article, keeping the elements."""
    _run_with_store(
        data_file,
        lambda store: _edit(store, article_id, lambda ed: ed.clear_highlights()),
    )


@app.command()
def gc(
    data_file: DataFileOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Remove content chunks no article refers to anymore."""
    removed = _run_with_store(
        data_file, lambda store: store.collect_orphan_chunks(), dry_run=dry_run
    )
    typer.echo(f"Removed {removed} orphaned content chunks")


@app.command(name="check-chunking")
def check_chunking(
    size_kb: Annotated[
        list[int] | None,
        typer.Option("--size-kb", "-k", help="Article size in KB (repeatable)"),
    ] = None,
) -> None:
    """Save and reload generated large articles in memory to verify chunking."""
    failed = 0
    for size in size_kb or [50, 200]:
        result = asyncio.run(run_chunking_check(size))
        verdict = "PASSED" if result.passed else "FAILED"
        typer.echo(
            f"{size}KB: {verdict} - {result.original_length} chars, "
            f"loaded {result.loaded_length}, {result.chunk_count} chunks"
        )
        failed += not result.passed
    if failed:
        raise typer.Exit(1)
