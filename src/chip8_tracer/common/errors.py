"""
例外・警告の定義モジュール。

エミュレーションで発生するエラーを「呼び出し元に通知して停止するもの（致命的）」と
「診断のみ行い実行を継続するもの（警告）」に分類します。
"""


class EmulationError(Exception):
    """エミュレータ全体の基底例外。"""
    pass


# @intent:responsibility プログラム（ROM）のロード失敗を表します。ロード失敗時は状態を一切変更しません。
class RomLoadError(EmulationError, ValueError):
    """Program image is too large or could not be read."""
    pass


class ConfigError(EmulationError, ValueError):
    """Invalid system configuration."""
    pass


# @intent:responsibility プログラム未ロードのままサイクルを実行しようとしたことを表します。
class ProgramNotLoadedError(EmulationError, RuntimeError):
    """step() was called before a program was loaded."""
    pass


# @intent:responsibility CPUを停止させる致命的エラーの基底クラス。
# @intent:rationale 未知のオペコード（警告）とは明確に区別し、捕捉側が停止判断をできるようにします。
class FatalCpuError(EmulationError):
    """Error after which the interpreter stops advancing until reset."""
    pass


class StackOverflowError(FatalCpuError):
    """Subroutine call beyond the call stack capacity."""
    pass


class StackUnderflowError(FatalCpuError):
    """Return with an empty call stack."""
    pass


# @intent:responsibility 範囲外アドレスや保護領域への書き込みを表します。
# @intent:rationale IndexErrorを継承し、既存のバス境界チェックの捕捉コードとも互換にします。
class MemoryAccessError(FatalCpuError, IndexError):
    """Access outside mapped memory, or a run-time write into the font ROM."""
    pass


# @intent:responsibility 未知のオペコードを検出したことを通知する診断用の警告です。実行は継続されます。
class UnknownOpcodeWarning(RuntimeWarning):
    pass
