"""CLI entry point for vegscan."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from .config import VegscanConfig, load_config
from .pipeline import AnalysisResult, analyze
from .rules import STATUSES, ReferenceData

_STATUS_LABELS = {
    "safe": "✅ 可食用",
    "warning": "⚠️ 需確認",
    "danger": "❌ 不可食用",
    "unknown": "❓ 未知",
}


def main(argv: list[str] | None = None) -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="vegscan",
        description="素食成分檢查 — 判斷食品成分是否適合素食者",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="設定檔路徑 (TOML)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="顯示詳細記錄"
    )

    sub = parser.add_subparsers(dest="command")

    # check
    check_parser = sub.add_parser("check", help="檢查成分文字")
    check_parser.add_argument("text", nargs="?", default=None, help="成分文字")
    check_parser.add_argument(
        "--file", "-f", type=str, default=None, help="從檔案讀取成分文字"
    )
    check_parser.add_argument("--json", action="store_true", help="以 JSON 格式輸出")
    check_parser.add_argument(
        "--ai", action="store_true", help="以 AI 判斷資料庫中沒有的成分"
    )

    # scan
    scan_parser = sub.add_parser("scan", help="辨識包裝照片並檢查成分")
    scan_parser.add_argument("image", type=str, nargs="+", help="圖片檔案")
    scan_parser.add_argument("--json", action="store_true", help="以 JSON 格式輸出")
    scan_parser.add_argument(
        "--ai", action="store_true", help="以 AI 判斷資料庫中沒有的成分"
    )
    scan_parser.add_argument(
        "--no-filter", action="store_true", help="不過濾非成分文字"
    )

    # cache-clear
    sub.add_parser("cache-clear", help="清除 AI 判斷快取")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    ReferenceData.configure(config.data.dir or None)

    match args.command:
        case "check":
            asyncio.run(_cmd_check(config, args))
        case "scan":
            asyncio.run(_cmd_scan(config, args))
        case "cache-clear":
            _cmd_cache_clear(config)


def _open_cache(config: VegscanConfig):
    if not config.cache.enabled:
        return None
    from .db import JudgeCacheDB

    return JudgeCacheDB(config.cache.db_path)


async def _run_analysis(config: VegscanConfig, text: str, use_ai: bool) -> AnalysisResult:
    if not (use_ai or config.judge.enabled):
        return await analyze(text)

    from .judge import create_judge

    try:
        judge = create_judge(config)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)

    cache = _open_cache(config)
    try:
        return await analyze(
            text,
            judge=judge,
            cache=cache,
            timeout=config.judge.timeout,
            locale=config.judge.locale,
        )
    finally:
        if cache is not None:
            cache.close()


def _print_result(result: AnalysisResult) -> None:
    explanation = result.explanation
    print(f"\n{explanation.icon} {explanation.title}")
    print(f"   {explanation.description}")
    print(f"   {result.summary}")

    for status in STATUSES:
        details = explanation.details[status]
        if not details:
            continue
        print(f"\n{_STATUS_LABELS[status]} ({len(details)} 項):")
        for d in details:
            name = d.name if d.name == d.display_name else f"{d.name} → {d.display_name}"
            print(f"  {name:<12} {d.reason}  [{d.category}]")
            if d.notes:
                print(f"  {'':<12} {d.notes}")

    if result.ai_judged:
        print(f"\n🤖 AI 判斷: {'、'.join(result.ai_judged)}")


def _emit(result: AnalysisResult, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    else:
        _print_result(result)


async def _cmd_check(config: VegscanConfig, args) -> None:
    if args.file:
        text = Path(args.file).read_text(encoding="utf-8")
    else:
        text = args.text or ""

    if not text.strip():
        print("請提供成分文字或使用 --file 指定檔案。", file=sys.stderr)
        sys.exit(1)

    result = await _run_analysis(config, text, args.ai)
    if result.explanation.summary.total == 0:
        print("未辨識到任何成分，請確認輸入內容。", file=sys.stderr)
        sys.exit(1)
    _emit(result, args.json)


async def _cmd_scan(config: VegscanConfig, args) -> None:
    from .ocr import create_ocr_backend
    from .ocr.filtering import GeminiIngredientFilter, filter_ocr_text

    try:
        backend = create_ocr_backend(config)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)

    ai_filter = None
    if config.filter.enabled and config.filter.api_key:
        ai_filter = GeminiIngredientFilter(
            api_key=config.filter.api_key, model=config.filter.model
        )

    failed = 0
    for image_path in args.image:
        if not args.json:
            print(f"🔍 辨識中: {image_path}")
        try:
            ocr = await backend.extract_text(image_path)
        except Exception as e:
            print(f"無法辨識文字: {image_path} {e}", file=sys.stderr)
            failed += 1
            continue
        if not ocr.success or not ocr.text.strip():
            print(f"無法辨識文字: {image_path} {ocr.error}", file=sys.stderr)
            failed += 1
            continue

        text = ocr.text
        if not args.no_filter:
            filtered = await filter_ocr_text(
                text, ai_filter=ai_filter, timeout=config.filter.timeout
            )
            text = filtered.ingredients_text
        if not text.strip():
            print(f"找不到成分標示: {image_path}", file=sys.stderr)
            failed += 1
            continue

        result = await _run_analysis(config, text, args.ai)
        if result.explanation.summary.total == 0:
            print(f"未辨識到任何成分: {image_path}", file=sys.stderr)
            failed += 1
            continue
        _emit(result, args.json)

    if failed:
        sys.exit(1)


def _cmd_cache_clear(config: VegscanConfig) -> None:
    from .db import JudgeCacheDB

    cache = JudgeCacheDB(config.cache.db_path)
    try:
        removed = cache.clear()
    finally:
        cache.close()
    print(f"已清除 {removed} 筆 AI 判斷快取。")
