"""
Fabula Ultima rulebook importer CLI.

Commands:
  import   Parse registered pages and save their records as JSON
  check    Parse registered pages and report, without saving
  tokens   Print one page's token stream (for grammar debugging)
  config   Show or set the stored rulebook PDF path
"""

import argparse
import json
import logging
import sys

from fabula_import.config import clear_pdf_path, get_config_path, get_pdf_path, set_pdf_path
from fabula_import.ingest.models import ImportConfig


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _resolve_pdf(args) -> str:
    pdf_path = getattr(args, "pdf", None) or get_pdf_path()
    if not pdf_path:
        print("Error: no rulebook PDF given. Pass --pdf, set FABULA_PDF, "
              "or run 'fabula-import config --pdf PATH'.")
        sys.exit(1)
    return pdf_path


def _make_import_config(args) -> ImportConfig:
    fallback = None if getattr(args, "strict_categories", False) else args.category_fallback
    return ImportConfig(
        pdf_path=_resolve_pdf(args),
        output_dir=getattr(args, "output", None) or "",
        pages=getattr(args, "pages", None),
        registry_path=getattr(args, "registry", None) or "",
        rulebook=args.rulebook,
        source_prefix=getattr(args, "source_prefix", None),
        page_offset=getattr(args, "page_offset", None),
        weapon_category_fallback=fallback,
    )


def _print_reports(pages: list[dict]) -> None:
    for page in pages:
        line = f"  p.{page['page']:<4} {page['category']:<14} {page['status']:<10}"
        if page["status"] == "success":
            line += f" {len(page['records'])} records ({page['source']})"
        elif page["status"] == "ambiguous":
            line += f" {page['count']} complete parses"
        print(line)
        if page["status"] == "failure":
            for err in page["errors"][:3]:
                print(f"         expected {err['message']}, found {err['found']}")


def _exit_status(pages: list[dict], strict: bool) -> int:
    if strict and any(p["status"] != "success" for p in pages):
        return 1
    return 0


def import_cmd(args):
    """Parse registered pages and save their records."""
    from fabula_import.ingest.pipeline import RulebookImporter

    importer = RulebookImporter(_make_import_config(args))
    summary = importer.run(save=True)

    counts = summary["counts"]
    print(f"\nImport complete!")
    print(f"  Output directory: {summary['output_dir']}")
    print(f"  Pages: {counts['success']} ok, {counts['failure']} failed, "
          f"{counts['ambiguous']} ambiguous")
    _print_reports(summary["pages"])
    sys.exit(_exit_status(summary["pages"], args.strict))


def check_cmd(args):
    """Parse registered pages and report, without saving."""
    from fabula_import.ingest.pipeline import RulebookImporter

    importer = RulebookImporter(_make_import_config(args))
    pages = [r.as_dict() for r in importer.check()]
    if args.json:
        print(json.dumps(pages, indent=2, ensure_ascii=False))
    else:
        _print_reports(pages)
    sys.exit(_exit_status(pages, args.strict))


def tokens_cmd(args):
    """Print the token stream of one page."""
    from fabula_import.ingest.tokenize import PDFTokenizer, dump_tokens

    with PDFTokenizer(_resolve_pdf(args)) as tokenizer:
        with tokenizer.page(args.page) as tokens:
            for line in dump_tokens(tokens, start=args.start, limit=args.limit):
                print(line)


def config_cmd(args):
    """Show or set the stored PDF path."""
    if args.pdf:
        set_pdf_path(args.pdf)
        print(f"Stored PDF path in {get_config_path()}")
    elif args.clear:
        clear_pdf_path()
        print(f"Cleared PDF path from {get_config_path()}")
    else:
        print(f"Config file: {get_config_path()}")
        print(f"PDF path: {get_pdf_path() or '(not set)'}")


def _add_parse_options(parser) -> None:
    parser.add_argument("--pdf", help="Rulebook PDF (defaults to FABULA_PDF or stored config)")
    parser.add_argument("--pages", help="Page range (e.g. '134-137,289')")
    parser.add_argument("--rulebook", default="core_rulebook", help="Bundled page registry")
    parser.add_argument("--registry", help="YAML file merged over the bundled registry")
    parser.add_argument("--source-prefix", help="Provenance tag prefix (default from registry)")
    parser.add_argument("--page-offset", type=int, help="PDF page minus printed page number")
    parser.add_argument(
        "--category-fallback", default="arcane",
        help="Weapon category for unrecognised category titles",
    )
    parser.add_argument(
        "--strict-categories", action="store_true",
        help="Reject unrecognised weapon category titles instead of falling back",
    )
    parser.add_argument("--strict", action="store_true", help="Exit non-zero unless every page succeeds")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fabula-import", description="Fabula Ultima rulebook importer")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    import_parser = sub.add_parser("import", help="Parse pages and save records as JSON")
    _add_parse_options(import_parser)
    import_parser.add_argument("--output", "-o", help="Asset directory")
    import_parser.set_defaults(func=import_cmd)

    check_parser = sub.add_parser("check", help="Parse pages and report without saving")
    _add_parse_options(check_parser)
    check_parser.add_argument("--json", action="store_true", help="Print reports as JSON")
    check_parser.set_defaults(func=check_cmd)

    tokens_parser = sub.add_parser("tokens", help="Print one page's token stream")
    tokens_parser.add_argument("page", type=int, help="1-based PDF page number")
    tokens_parser.add_argument("--pdf", help="Rulebook PDF (defaults to FABULA_PDF or stored config)")
    tokens_parser.add_argument("--start", type=int, default=0, help="First token index")
    tokens_parser.add_argument("--limit", type=int, help="Number of tokens to print")
    tokens_parser.set_defaults(func=tokens_cmd)

    config_parser = sub.add_parser("config", help="Show or set the stored PDF path")
    config_parser.add_argument("--pdf", help="Store this rulebook PDF path")
    config_parser.add_argument("--clear", action="store_true", help="Forget the stored PDF path")
    config_parser.set_defaults(func=config_cmd)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        sys.exit(1)
    args.func(args)


if __name__ == "__main__":
    main()
