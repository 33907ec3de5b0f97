#!/usr/bin/env python3
"""
CLI script to run the HTML front-end over files.

Parses each file, then prints the extracted metadata and body text as JSON.

Usage:
    python run_frontend.py page.html
    python run_frontend.py *.html --backend lxml -o results.json
    python run_frontend.py legacy.html --encoding windows-1252 --xhtml

Defaults for --backend and --encoding come from HTML_FRONTEND_BACKEND and
HTML_FRONTEND_ENCODING (a .env file in the working directory is honored).
"""

import argparse
import json
import logging
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

from html_frontend.main import parse_html_file
from html_frontend.schemas import ParseOptions
from html_frontend.logger import setup_logger


def main():
    parser = argparse.ArgumentParser(description="Extract metadata and body text from HTML files")
    parser.add_argument("files", nargs="+", help="HTML files to process")
    parser.add_argument("--output", "-o", help="Output JSON file")
    parser.add_argument("--backend", "-b", choices=["html5lib", "lxml", "html.parser"],
                        help="Lenient parser to use")
    parser.add_argument("--encoding", "-e", help="Character encoding hint")
    parser.add_argument("--xhtml", "-x", action="store_true", help="Include the XHTML serialization")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args()

    setup_logger(level=logging.DEBUG if args.verbose else logging.WARNING)

    # Command-line flags override the environment
    overrides = {}
    if args.backend:
        overrides["backend"] = args.backend
    if args.encoding:
        overrides["encoding"] = args.encoding
    options = ParseOptions.from_env().model_copy(update=overrides)

    results = []

    for filepath in args.files:
        path = Path(filepath)
        print(f"Parsing: {path.name}")

        # One bad file should not stop the batch; its error goes in the report
        try:
            result = parse_html_file(path, options)

            entry = {
                "file": path.name,
                "status": "success",
                "metadata": result.metadata,
                "text": result.text,
            }
            if args.xhtml:
                entry["xhtml"] = result.xhtml
            results.append(entry)

            print(f"  ✓ {len(result.metadata)} metadata field(s), {len(result.text)} chars of text")

        except Exception as e:
            results.append({
                "file": path.name,
                "status": "error",
                "error": str(e)
            })
            print(f"  ✗ Error: {e}")

    # ensure_ascii=False preserves unicode characters in the JSON
    output = json.dumps(results, indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"\nSaved to: {args.output}")
    else:
        print("\n" + output)


if __name__ == "__main__":
    main()
