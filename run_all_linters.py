#!/usr/bin/env python3
"""統一的檢查腳本，執行格式化、靜態分析與單元測試。

依序執行：
1. Black 格式化檢查（--fix 時直接格式化）
2. isort 匯入排序檢查（--fix 時直接排序）
3. Ruff 靜態檢查
4. Pylint 靜態分析
5. pytest 單元測試

所有輸出會集中顯示，最後列出總結。
"""

import argparse
from pathlib import Path
import subprocess
import sys

ROOT = Path(__file__).parent
SOURCES = ["app", "core", "infrastructure", "main.py"]


def run_command(cmd: list[str], description: str) -> tuple[bool, str]:
    """執行命令並返回成功狀態和輸出。"""
    print(f"\n{'=' * 60}")
    print(f"執行: {description}")
    print(f"命令: {' '.join(cmd)}")
    print("=" * 60)

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False, cwd=ROOT)
    except OSError as e:
        print(f"❌ 執行錯誤: {e}")
        return False, str(e)

    success = result.returncode == 0
    output = result.stdout + result.stderr
    print("✅ 成功" if success else "❌ 失敗")
    print(f"\n輸出:\n{output}" if output.strip() else "(無輸出)")
    return success, output


def build_commands(fix: bool, skip_tests: bool) -> list[tuple[list[str], str]]:
    py = sys.executable
    commands = [
        ([py, "-m", "black", "."] + ([] if fix else ["--check"]), "Black 格式化"),
        ([py, "-m", "isort", "."] + ([] if fix else ["--check-only"]), "isort 匯入排序"),
        ([py, "-m", "ruff", "check", "."], "Ruff 靜態檢查"),
        ([py, "-m", "pylint", *SOURCES], "Pylint 靜態分析"),
    ]
    if not skip_tests:
        commands.append(([py, "-m", "pytest", "-q"], "pytest 單元測試"))
    return commands


def main() -> None:
    """主函數：依序執行所有檢查。"""
    ap = argparse.ArgumentParser(description="執行所有 linter 與測試")
    ap.add_argument("--fix", action="store_true", help="直接套用 black / isort 格式化")
    ap.add_argument("--skip-tests", action="store_true", help="不執行 pytest")
    args = ap.parse_args()

    results = [
        (description, *run_command(cmd, description))
        for cmd, description in build_commands(args.fix, args.skip_tests)
    ]

    print(f"\n{'=' * 60}")
    print("總結報告")
    print("=" * 60)
    for description, success, _ in results:
        print(f"{description}: {'✅ 通過' if success else '❌ 失敗'}")

    all_passed = all(success for _, success, _ in results)
    print(f"\n整體結果: {'✅ 全部通過' if all_passed else '❌ 有錯誤'}")
    sys.exit(0 if all_passed else 1)


if __name__ == "__main__":
    main()
