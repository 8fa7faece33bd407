# src/chip8_tracer/ui/app.py
"""
アプリケーションのエントリポイント。
コマンドライン引数を解釈し、メインウィンドウを起動します。
"""
import argparse
import sys
from typing import List, Optional

from PySide6.QtWidgets import QApplication

from chip8_tracer.common.errors import EmulationError
from chip8_tracer.config.loader import ConfigLoader
from chip8_tracer.config.models import SystemConfig
from .main_window import MainWindow

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chip8-tracer", description="CHIP-8 interpreter and tracer.")
    parser.add_argument("rom", nargs="?", help="Path to a CHIP-8 program image (.ch8).")
    parser.add_argument("--config", help="Path to a YAML system configuration file.")
    parser.add_argument("--run", action="store_true", help="Start running immediately after loading the ROM.")
    return parser

# @intent:responsibility アプリケーションを起動し、メインウィンドウを表示します。
def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = ConfigLoader().load_from_file(args.config) if args.config else SystemConfig()
    except EmulationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    app = QApplication(sys.argv[:1])
    main_win = MainWindow(config)
    if args.rom:
        try:
            main_win.load_rom(args.rom)
        except EmulationError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        if args.run:
            main_win.start()
    main_win.show()
    return app.exec()

if __name__ == '__main__':
    sys.exit(main())
