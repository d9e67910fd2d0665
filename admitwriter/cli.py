"""CLI entry point for admitwriter."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated, Any

import typer
import yaml
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from admitwriter.config import AdmitWriterConfig, load_config
from admitwriter.config.loader import DEFAULT_CONFIG_TEMPLATE
from admitwriter.errors import AdmitWriterError, GenerationFailedError
from admitwriter.interfaces import LocalIdentityProvider, SavedDocument, require_identity
from admitwriter.llm import create_llm_provider
from admitwriter.log import configure_logging
from admitwriter.output import DocumentWriter
from admitwriter.profile import normalize_profile
from admitwriter.writer import (
    SECTIONS,
    AssembledDocument,
    GenerationRequest,
    GenerationStream,
    SectionOrchestrator,
    SOPReviewer,
    WriterSession,
)
from admitwriter.writer.orchestrator import assemble_sections
from admitwriter.writer.sections import resolve_section_id

app = typer.Typer(
    name="admitwriter",
    help="Section-aware Statement of Purpose writer for MBA applications.",
)

config_app = typer.Typer(help="Manage admitwriter configuration.")
app.add_typer(config_app, name="config")

console = Console()

# Global state
_config: AdmitWriterConfig | None = None


def _get_config() -> AdmitWriterConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to admitwriter.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    configure_logging(_config.log_level, _config.log_format)


def _fail(e: Exception) -> typer.Exit:
    label = "Generation failed" if isinstance(e, GenerationFailedError) else "Error"
    rprint(f"[red]{label}:[/red] {escape(str(e))}")
    return typer.Exit(1)


def _load_profile(path: str) -> dict[str, Any]:
    """Read a candidate profile from a JSON or YAML file."""
    p = Path(path)
    if not p.is_file():
        raise ValueError(f"Profile file not found: {path}")
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid profile file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Profile file {path} must contain a mapping")
    return data


def _build_request(
    cfg: AdmitWriterConfig,
    target: str,
    words: int | None,
    tone: str | None,
    highlights: str,
    instructions: str,
) -> GenerationRequest:
    return GenerationRequest.parse({
        "target_identity": target,
        "length_target": words if words is not None else cfg.writer.default_word_limit,
        "tone": tone or cfg.writer.default_tone,
        "freeform_highlights": highlights,
        "freeform_instructions": instructions,
    })


def _orchestrator(cfg: AdmitWriterConfig) -> SectionOrchestrator:
    llm = create_llm_provider(cfg.llm)
    return SectionOrchestrator.from_config(llm, cfg, identity=LocalIdentityProvider())


async def _print_stream(stream: GenerationStream) -> Any:
    async with stream:
        async for chunk in stream:
            console.print(chunk, end="", markup=False, highlight=False)
        console.print()
        return await stream.result()


def _show_stats(document: AssembledDocument, title: str) -> None:
    stats = document.stats
    limit = f" / {stats.word_limit}" if stats.word_limit else ""
    over = f"\n[red]Over limit by {stats.words_over} words[/red]" if stats.over_limit else ""
    rprint(Panel(
        f"[dim]Words:[/dim]      {stats.word_count}{limit}\n"
        f"[dim]Characters:[/dim] {stats.char_count}\n"
        f"[dim]Paragraphs:[/dim] {stats.paragraph_count}\n"
        f"[dim]Reading:[/dim]    ~{stats.reading_minutes} min{over}",
        title=title,
        border_style="green",
    ))


def _save_document(
    cfg: AdmitWriterConfig,
    target: str,
    document: AssembledDocument,
    output: str | None,
    dry_run: bool = False,
) -> Path:
    identity = require_identity(LocalIdentityProvider())
    out_cfg = cfg.output
    if output:
        out_cfg = out_cfg.model_copy(update={"base_dir": output})
    saved = SavedDocument(
        target_identity=target,
        content=document.text,
        word_count=document.stats.word_count,
        owner=identity.user_id,
    )
    return DocumentWriter(out_cfg).write(saved, dry_run=dry_run)


# ---------------------------------------------------------------------------
# Generation commands
# ---------------------------------------------------------------------------


@app.command()
def generate(
    profile: str = typer.Argument(..., help="Candidate profile (JSON or YAML)"),
    target: str = typer.Option(..., "--target", "-t", help="Target school or program"),
    words: int | None = typer.Option(None, "--words", "-w", help="Word limit"),
    tone: str | None = typer.Option(None, "--tone", help="professional, conversational, confident or humble"),
    highlights: str = typer.Option("", "--highlights", help="Stories the candidate wants told"),
    instructions: str = typer.Option("", "--instructions", help="Extra instructions"),
    stream: bool = typer.Option(True, "--stream/--no-stream", help="Print text as it arrives"),
    save: bool = typer.Option(False, "--save", help="Save the result as a document"),
    dry_run: bool = typer.Option(False, "--dry-run", help="With --save, show where the document would go"),
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Override output directory")
    ] = None,
) -> None:
    """Generate a complete statement of purpose in one call."""
    cfg = _get_config()
    try:
        raw_profile = _load_profile(profile)
        request = _build_request(cfg, target, words, tone, highlights, instructions)
        orchestrator = _orchestrator(cfg)
        if stream:
            rprint(f"[bold]Writing[/bold] SOP for {escape(request.target_identity)}...\n")
            document = asyncio.run(
                _print_stream(orchestrator.stream_full(raw_profile, request, request.length_target))
            )
        else:
            document = asyncio.run(
                orchestrator.request_full(raw_profile, request, request.length_target)
            )
            console.print(document.text, markup=False, highlight=False)
    except (AdmitWriterError, ValueError) as e:
        raise _fail(e)

    _show_stats(document, "SOP Complete")
    if save:
        try:
            dest = _save_document(cfg, request.target_identity, document, output, dry_run)
        except (AdmitWriterError, ValueError) as e:
            raise _fail(e)
        label = "Would save" if dry_run else "Saved"
        rprint(f"[green]{label}:[/green] {dest}")


@app.command()
def section(
    profile: str = typer.Argument(..., help="Candidate profile (JSON or YAML)"),
    section_id: str = typer.Argument(..., help="Section id (see `admitwriter sections`)"),
    session: str = typer.Option(..., "--session", "-s", help="Session file to read and update"),
    target: str = typer.Option(..., "--target", "-t", help="Target school or program"),
    words: int | None = typer.Option(None, "--words", "-w", help="Word limit for the whole SOP"),
    tone: str | None = typer.Option(None, "--tone", help="professional, conversational, confident or humble"),
    highlights: str = typer.Option("", "--highlights", help="Stories the candidate wants told"),
    instructions: str = typer.Option("", "--instructions", help="Extra instructions"),
    stream: bool = typer.Option(True, "--stream/--no-stream", help="Print text as it arrives"),
) -> None:
    """Generate (or regenerate) one section into a session file."""
    cfg = _get_config()
    try:
        raw_profile = _load_profile(profile)
        request = _build_request(cfg, target, words, tone, highlights, instructions)
        writer_session = WriterSession.load(session)
        orchestrator = _orchestrator(cfg)
        if stream:
            generated = asyncio.run(
                _print_stream(orchestrator.stream_section(writer_session, raw_profile, request, section_id))
            )
        else:
            generated = asyncio.run(
                orchestrator.request_section(writer_session, raw_profile, request, section_id)
            )
            console.print(generated.text, markup=False, highlight=False)
    except (AdmitWriterError, ValueError) as e:
        raise _fail(e)

    writer_session.save(session)
    done = len(writer_session.completed_ids())
    rprint(
        f"[green]Stored[/green] {generated.section_id} in {session} "
        f"({done}/{len(SECTIONS)} sections written, {orchestrator.quorum} needed to assemble)"
    )


@app.command()
def assemble(
    session: str = typer.Option(..., "--session", "-s", help="Session file"),
    quorum: int | None = typer.Option(None, "--quorum", "-q", help="Override writer.quorum"),
    words: int | None = typer.Option(None, "--words", "-w", help="Word limit for the stats"),
    target: str | None = typer.Option(None, "--target", "-t", help="Target school, required with --save"),
    save: bool = typer.Option(False, "--save", help="Save the result as a document"),
    dry_run: bool = typer.Option(False, "--dry-run", help="With --save, show where the document would go"),
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Override output directory")
    ] = None,
) -> None:
    """Join the written sections of a session into one document."""
    cfg = _get_config()
    if save and not target:
        rprint("[red]Error:[/red] --target is required with --save")
        raise typer.Exit(1)
    try:
        writer_session = WriterSession.load(session)
        q = cfg.writer.quorum if quorum is None else quorum
        document = assemble_sections(
            writer_session, q, words if words is not None else cfg.writer.default_word_limit
        )
    except (AdmitWriterError, ValueError) as e:
        raise _fail(e)

    console.print(document.text, markup=False, highlight=False)
    _show_stats(document, f"Assembled {len(document.section_ids)} sections")
    if save:
        try:
            dest = _save_document(cfg, target, document, output, dry_run)
        except (AdmitWriterError, ValueError) as e:
            raise _fail(e)
        label = "Would save" if dry_run else "Saved"
        rprint(f"[green]{label}:[/green] {dest}")


@app.command()
def discard(
    section_id: str = typer.Argument(..., help="Section id to drop"),
    session: str = typer.Option(..., "--session", "-s", help="Session file"),
) -> None:
    """Remove a section from a session file."""
    try:
        writer_session = WriterSession.load(session)
        removed = writer_session.discard(section_id)
    except (AdmitWriterError, ValueError) as e:
        raise _fail(e)

    if removed is None:
        rprint(f"[yellow]{escape(resolve_section_id(section_id))} was not written yet.[/yellow]")
        return
    writer_session.save(session)
    rprint(f"[green]Discarded[/green] {removed.section_id}")


@app.command()
def review(
    file: str = typer.Argument(..., help="SOP text or markdown file"),
    target: str = typer.Option(..., "--target", "-t", help="Target school or program"),
    words: int | None = typer.Option(None, "--words", "-w", help="Word limit"),
    format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: table or json")
    ] = "table",
) -> None:
    """Score a statement of purpose against admissions criteria."""
    cfg = _get_config()
    path = Path(file)
    if not path.is_file():
        rprint(f"[red]Error:[/red] File not found: {escape(file)}")
        raise typer.Exit(1)
    text = path.read_text(encoding="utf-8")
    if text.startswith("---"):
        end = text.find("---", 3)
        if end != -1:
            text = text[end + 3:]

    try:
        reviewer = SOPReviewer(
            create_llm_provider(cfg.llm),
            min_chars=cfg.review.min_chars,
            temperature=cfg.review.temperature,
            max_tokens=cfg.review.max_tokens,
        )
        result = asyncio.run(
            reviewer.review(text, target, words if words is not None else cfg.writer.default_word_limit)
        )
    except (AdmitWriterError, ValueError) as e:
        raise _fail(e)

    if format == "json":
        console.print(json.dumps(result.model_dump(by_alias=True), indent=2), markup=False, highlight=False)
        return

    rprint(Panel(escape(result.summary), title=f"Overall {result.overall_score}/100", border_style="blue"))
    table = Table(title="Criteria")
    table.add_column("Criterion", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Comment")
    for name, score in result.scores:
        table.add_row(name.replace("_", " ").title(), f"{score.score}/10", escape(score.comment))
    rprint(table)
    for s in result.strengths:
        rprint(f"  [green]+[/green] {escape(s)}")
    for imp in result.improvements:
        rprint(f"  [yellow]{imp.priority}:[/yellow] {escape(imp.issue)} -> {escape(imp.suggestion)}")
    if result.cliches:
        rprint(f"[dim]Cliches:[/dim] {escape(', '.join(result.cliches))}")
    if result.admission_chance:
        rprint(f"[dim]Admission chance:[/dim] {escape(result.admission_chance)}")


# ---------------------------------------------------------------------------
# Inspection commands
# ---------------------------------------------------------------------------


@app.command()
def profile(
    path: str = typer.Argument(..., help="Candidate profile (JSON or YAML)"),
) -> None:
    """Show the normalized profile summary that prompts are built from."""
    try:
        normalized = normalize_profile(_load_profile(path))
    except (AdmitWriterError, ValueError) as e:
        raise _fail(e)
    console.print(normalized.render(), markup=False, highlight=False)


@app.command()
def sections() -> None:
    """List the section catalog in document order."""
    table = Table(title=f"Sections ({len(SECTIONS)})")
    table.add_column("Id", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Share", justify="right")
    table.add_column("Description")
    for s in SECTIONS:
        table.add_row(s.id, s.display_name, f"{s.narrative_share}%", s.description)
    rprint(table)


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default admitwriter.yaml in current directory."""
    target = Path("admitwriter.yaml")
    if target.exists() and not force:
        rprint("[yellow]admitwriter.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
