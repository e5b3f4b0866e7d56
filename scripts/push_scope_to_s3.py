"""Utility script to validate a scope dataset and upload it to S3."""

from __future__ import annotations

import argparse
import json
import os
from pathlib import Path

import boto3

from schemas import dump_scope_dataset, parse_scope_document


def _parse_s3_uri(uri: str) -> tuple[str, str]:
    if not uri.startswith("s3://") or "/" not in uri[5:]:
        raise SystemExit(f"S3 URI harus berformat s3://bucket/key: {uri}")
    bucket, key = uri[5:].split("/", 1)
    return bucket, key


def _count_leaves(dataset) -> int:
    return sum(
        len(child.details)
        for entry in dataset.values()
        for iaf_scope in entry.scope
        for nace_detail in iaf_scope.nace_details
        for child in nace_detail.children
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Push a scope dataset JSON file into S3")
    parser.add_argument("scope_path", help="Path to scope_en.json or scope_id.json")
    parser.add_argument("s3_uri", help="Destination, e.g. s3://bucket/scope/scope_en.json")
    parser.add_argument("--region", default=os.getenv("AWS_REGION"))
    parser.add_argument(
        "--normalized",
        action="store_true",
        help="Upload the normalized dataset instead of the original file contents",
    )
    parser.add_argument("--dry-run", action="store_true", help="Validate only, do not upload")
    args = parser.parse_args()

    scope_path = Path(args.scope_path)
    if not scope_path.exists():
        raise SystemExit(f"File scope tidak ditemukan: {scope_path}")

    raw = scope_path.read_text(encoding="utf-8")
    try:
        document = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SystemExit(f"File scope bukan JSON yang valid: {exc}")
    if not isinstance(document, dict):
        raise SystemExit("File scope harus berisi objek JSON")

    dataset = parse_scope_document(document)
    print(f"Memuat {len(dataset)} scope dengan {_count_leaves(dataset)} detail dari {scope_path}")
    if not dataset:
        raise SystemExit("Tidak ada scope yang valid ditemukan")

    if args.dry_run:
        print("Dry run selesai, tidak ada yang diunggah.")
        return

    body = raw
    if args.normalized:
        body = json.dumps(dump_scope_dataset(dataset), ensure_ascii=False, indent=2)

    bucket, key = _parse_s3_uri(args.s3_uri)
    s3 = boto3.session.Session(region_name=args.region).client("s3")
    response = s3.put_object(
        Bucket=bucket,
        Key=key,
        Body=body.encode("utf-8"),
        ContentType="application/json",
    )
    print(f"Upload ke {args.s3_uri} -> {response.get('ETag')}")


if __name__ == "__main__":
    main()
