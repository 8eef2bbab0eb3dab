import argparse
import json
import sys
from pathlib import Path
from typing import Any, List

from wiza_enricher.client import get_reveal_client, verify_credentials
from wiza_enricher.flow import enrichment_batch_flow
from wiza_enricher.results import ItemOutcome
from wiza_enricher.schema import AdditionalFields, NodeParameters


def read_items(path: Path) -> List[dict[str, Any]]:
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    items = []
    for n, line in enumerate(path.read_text(encoding="utf-8").splitlines(), 1):
        if not line.strip():
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            raise ValueError(f"Line {n} is not valid JSON: {e}") from e
        if not isinstance(record, dict):
            raise ValueError(f"Line {n} must be a JSON object.")
        items.append(record)

    if not items:
        raise ValueError("Input file is empty.")

    return items


def print_summary(results: List[ItemOutcome]) -> None:
    ok = sum(1 for r in results if r.status == "ok")
    failed = len(results) - ok

    print("\nBatch Summary", file=sys.stderr)
    print("=" * 40, file=sys.stderr)
    print(f"Total   : {len(results)}", file=sys.stderr)
    print(f"Success : {ok}", file=sys.stderr)
    print(f"Failed  : {failed}", file=sys.stderr)
    print(file=sys.stderr)

    if failed:
        print("Failures:", file=sys.stderr)
        for r in results:
            if r.status == "failed":
                print(f"- item {r.paired_item} {r.error_type}: {r.error_message}", file=sys.stderr)
        print(file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Enrich contacts with Wiza from a JSON-lines file"
    )
    parser.add_argument(
        "input_file",
        type=Path,
        nargs="?",
        help="Path to items.jsonl (one JSON object per line)",
    )
    parser.add_argument(
        "--operation",
        choices=["emailFinder", "phoneFinder", "linkedinFinder"],
        default="emailFinder",
    )
    parser.add_argument(
        "--input-type",
        choices=["email", "linkedinUrl", "contactDetails", "allFields"],
        default="contactDetails",
    )
    parser.add_argument("--email-type", choices=["work", "personal", "any"], default=None)
    parser.add_argument("--timeout", type=float, default=None, help="Seconds to wait per item")
    parser.add_argument("--continue-on-fail", action="store_true")
    parser.add_argument("--output", type=Path, default=None, help="Write outcomes JSON here instead of stdout")
    parser.add_argument("--check-credentials", action="store_true", help="Only test the configured API key")
    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.check_credentials:
        ok, message = verify_credentials(get_reveal_client())
        print(message)
        return 0 if ok else 1

    if args.input_file is None:
        parser.error("input_file is required unless --check-credentials is given")

    items = read_items(args.input_file)
    node_parameters = NodeParameters(
        operation=args.operation,
        input_type=args.input_type,
        additional_fields=AdditionalFields(email_type=args.email_type, timeout=args.timeout),
    )
    results = enrichment_batch_flow(items, node_parameters, continue_on_fail=args.continue_on_fail)

    payload = json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=False)
    if args.output:
        args.output.write_text(payload, encoding="utf-8")
    else:
        print(payload)

    print_summary(results)
    return 0 if all(r.status == "ok" for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
