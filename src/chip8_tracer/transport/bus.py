# chip8_tracer/transport/bus.py
"""
Transport Layer (メモリバス)

インタプリタのメモリ空間（既定4KB）をデバイスの組み合わせとして表現します。
フォントを置く低位領域はROM、プログラム原点以降はRAMとして登録され、
命令からのアクセスは全てここを通って境界チェックとアクセス記録が行われます。
"""
from abc import ABC, abstractmethod
from typing import List, NamedTuple, Tuple
from dataclasses import dataclass
from enum import Enum

from chip8_tracer.common.errors import MemoryAccessError

# @intent:responsibility アクセスの種別（読み込み・書き込み）。
class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"

# @intent:responsibility 1回のメモリアクセスを記録します。Snapshotとデバッガのブレークポイント判定が参照します。
@dataclass(frozen=True)
class BusAccess:
    address: int
    data: int  # 転送された1バイト
    access_type: BusAccessType

# @intent:responsibility メモリ空間の一部を受け持つデバイスのインターフェース。
class Device(ABC):
    """
    バス上のデバイス。read/writeに渡されるアドレスは、デバイス先頭からのオフセットです。
    """
    @abstractmethod
    def read(self, address: int) -> int:
        pass

    @abstractmethod
    def write(self, address: int, data: int) -> None:
        pass

    # @intent:responsibility 初期化時の書き込み（フォント、プログラムのロード）。実行時の書き込み制限を受けません。
    @abstractmethod
    def load(self, address: int, data: int) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

# @intent:responsibility バイト配列による読み書き可能なメモリ。
class RAM(Device):
    # @intent:pre-condition sizeは1以上の整数。
    def __init__(self, size: int):
        if not isinstance(size, int) or size <= 0:
            raise ValueError("RAM size must be a positive integer.")
        self._size = size
        self._memory = bytearray(size)

    def _check_address(self, address: int) -> None:
        if address < 0 or address >= self._size:
            raise MemoryAccessError(
                f"Address {address} out of bounds for {type(self).__name__} of size {self._size}."
            )

    def read(self, address: int) -> int:
        self._check_address(address)
        return self._memory[address]

    def write(self, address: int, data: int) -> None:
        self._check_address(address)
        if data < 0 or data > 0xFF:
            raise ValueError(f"Data {data} is not an 8-bit value.")
        self._memory[address] = data

    def load(self, address: int, data: int) -> None:
        RAM.write(self, address, data)

    def clear(self) -> None:
        self._memory[:] = bytes(self._size)

    def get_size(self) -> int:
        return self._size

# @intent:responsibility 組み込みフォントを格納する、実行中は書き込み不可のメモリ。
class ROM(RAM):
    """
    load経由でのみ内容を設定できるメモリ。
    命令からの書き込みは致命的なMemoryAccessErrorとして報告されます。
    """
    def write(self, address: int, data: int) -> None:
        self._check_address(address)
        raise MemoryAccessError(f"Write to read-only address {address:#05x} (data {data:#04x}).")

# @intent:data_structure バス上の1つのマッピング。endは範囲に含まれます。
class Mapping(NamedTuple):
    start: int
    end: int
    device: Device

# @intent:responsibility アドレスから担当デバイスを引き、アクセスを委譲・記録します。
class Bus:
    """
    アドレス空間全体を表すバス。
    read/writeはアクティビティログに残り、peek/loadは残りません。
    """
    def __init__(self):
        self._mappings: List[Mapping] = []
        self._activity: List[BusAccess] = []

    # @intent:responsibility 前回の取得以降に記録されたアクセスを返し、ログを空にします。
    def get_and_clear_activity_log(self) -> List[BusAccess]:
        activity, self._activity = self._activity, []
        return activity

    # @intent:pre-condition 0 <= start_address <= end_address。RAM系デバイスはサイズが範囲長と一致すること。
    # @intent:rationale 範囲の重複はSystemBuilderがレイアウト検証で防ぎます。
    def register_device(self, start_address: int, end_address: int, device: Device) -> None:
        if start_address < 0 or start_address > end_address:
            raise ValueError("Invalid address range: start_address must be <= end_address and non-negative.")
        if not isinstance(device, Device):
            raise TypeError("Device must be an instance of a class derived from Device.")

        span = end_address - start_address + 1
        if isinstance(device, RAM) and device.get_size() != span:
            raise ValueError(
                f"Registered {type(device).__name__} device size ({device.get_size()} bytes) does not match "
                f"the specified address range size ({span} bytes)."
            )
        self._mappings.append(Mapping(start_address, end_address, device))

    # @intent:post-condition どのデバイスにも属さないアドレスはMemoryAccessError。
    def _resolve(self, address: int) -> Tuple[Device, int]:
        for mapping in self._mappings:
            if mapping.start <= address <= mapping.end:
                return mapping.device, address - mapping.start
        raise MemoryAccessError(f"Address {address:#06x} not mapped to any device.")

    # @intent:responsibility マップ済みの最大アドレス+1を返します。
    def get_address_limit(self) -> int:
        return max((m.end + 1 for m in self._mappings), default=0)

    def read(self, address: int) -> int:
        device, offset = self._resolve(address)
        value = device.read(offset)
        self._activity.append(BusAccess(address, value, BusAccessType.READ))
        return value

    # @intent:responsibility 記録を残さない読み込み。逆アセンブラとUIが使用します。
    def peek(self, address: int) -> int:
        device, offset = self._resolve(address)
        return device.read(offset)

    def write(self, address: int, data: int) -> None:
        device, offset = self._resolve(address)
        device.write(offset, data)
        self._activity.append(BusAccess(address, data, BusAccessType.WRITE))

    # @intent:responsibility 初期化用の書き込み。ROMにも書き込め、記録は残しません。
    def load(self, address: int, data: int) -> None:
        device, offset = self._resolve(address)
        device.load(offset, data)

    def clear(self) -> None:
        for mapping in self._mappings:
            mapping.device.clear()
        self._activity = []
