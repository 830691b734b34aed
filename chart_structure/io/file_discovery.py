"""File discovery and selection utilities."""

import sys
from pathlib import Path
from typing import List, Tuple

SUPPORTED_EXTENSIONS = {'.csv', '.json'}


def find_data_files(directory: Path) -> List[Path]:
    """Scan directory for supported bar files."""
    directory = Path(directory)
    if not directory.exists():
        return []

    files = []
    for ext in SUPPORTED_EXTENSIONS:
        files.extend(directory.glob(f'*{ext}'))
    return sorted(files, key=lambda x: x.name.lower())


def display_file_menu(files: List[Path]) -> None:
    """Display interactive file selection menu."""
    print("\n📂 请选择要分析的数据文件:\n")
    for idx, f in enumerate(files, 1):
        size_kb = f.stat().st_size / 1024
        print(f"  [{idx}] {f.name:<24} ({size_kb:.1f} KB)")
    print(f"\n  [0] 退出\n")


def parse_user_selection(raw_input: str, all_files: List[Path]) -> Tuple[List[Path], List[str]]:
    """
    Parse user input and return selected files.

    Returns:
        Tuple of (selected files, invalid inputs)
    """
    parts = raw_input.replace(',', ' ').split()
    selected_files = []
    invalid_inputs = []

    for part in parts:
        try:
            idx = int(part) - 1
            if 0 <= idx < len(all_files):
                selected_files.append(all_files[idx])
            else:
                invalid_inputs.append(part)
        except ValueError:
            invalid_inputs.append(part)

    return selected_files, invalid_inputs


def select_file_interactive(data_dir: Path) -> str:
    """
    Interactive file selection.

    Returns:
        Selected file path as string
    """
    files = find_data_files(data_dir)

    if not files:
        print(f"❌ 目录 '{data_dir}' 下没有找到可处理的数据文件")
        print(f"   支持的格式: {', '.join(sorted(SUPPORTED_EXTENSIONS))}")
        print(f"   请将数据文件放到 {data_dir}/ 目录下")
        sys.exit(1)

    if len(files) == 1:
        print(f"找到数据文件: {files[0].name}")
        return str(files[0])

    display_file_menu(files)

    while True:
        try:
            raw_input = input("请输入序号: ").strip()
            if raw_input == '0':
                print("已退出")
                sys.exit(0)

            selected_files, invalid_inputs = parse_user_selection(raw_input, files)

            if invalid_inputs:
                print(f"❌ 无效的序号: {', '.join(invalid_inputs)}")
                continue

            if len(selected_files) != 1:
                print("请选择一个文件")
                continue

            print(f"\n✅ 已选择: {selected_files[0].name}\n")
            return str(selected_files[0])

        except KeyboardInterrupt:
            print("\n已取消")
            sys.exit(0)
