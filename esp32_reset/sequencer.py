"""
ESP32S3 硬體重啟序列
DTR 控制 EN 腳 (DTR=1 → EN 低電位)，RTS 控制 GPIO0 腳 (RTS=1 → GPIO0 低電位)
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from rich.console import Console
from rich.markup import escape

from .lines import (
    DeviceOpenError,
    LineControl,
    LineControlError,
    LineState,
    SerialLineControl,
)

console = Console()
err_console = Console(stderr=True, soft_wrap=True)

# 重啟脈衝時序 (秒)
ARM_DELAY = 0.05
RESET_DELAY = 0.1
BOOT_DELAY = 0.2


@dataclass
class ResetTiming:
    """三個步驟之後的等待時間"""

    arm_delay: float = ARM_DELAY      # Step 1 之後
    reset_delay: float = RESET_DELAY  # Step 2 之後 (EN 維持低電位)
    boot_delay: float = BOOT_DELAY    # Step 3 之後，等待晶片開始執行

    @property
    def total(self) -> float:
        return self.arm_delay + self.reset_delay + self.boot_delay

    def to_dict(self) -> Dict[str, float]:
        return {
            "arm_delay": self.arm_delay,
            "reset_delay": self.reset_delay,
            "boot_delay": self.boot_delay,
        }


class ResetState(Enum):
    CLOSED = "closed"
    OPENED = "opened"
    ARMED = "armed"
    RESET_ASSERTED = "reset_asserted"
    RELEASED = "released"


class ResetSequencer:
    """
    透過 RTS/DTR 重啟 ESP32S3

    使用範例:
        sequencer = ResetSequencer()
        exit_code = sequencer.run("/dev/ttyCH343USB0", bootloader_mode=True)
    """

    def __init__(self,
                 opener: Optional[Callable[[str], LineControl]] = None,
                 timing: Optional[ResetTiming] = None,
                 sleep: Optional[Callable[[float], None]] = None,
                 verbose: bool = False):
        """
        Args:
            opener: 依裝置路徑開啟 LineControl，預設為 SerialLineControl.open
            timing: 重啟時序，預設 50/100/200 ms
            sleep: 等待函式，預設 time.sleep
            verbose: 每次寫入後顯示 DTR/RTS 電平
        """
        self.opener = opener or SerialLineControl.open
        self.timing = timing or ResetTiming()
        self.sleep = sleep or time.sleep
        self.verbose = verbose
        self.state = ResetState.CLOSED
        self.history: List[ResetState] = []

    def _enter(self, state: ResetState):
        self.state = state
        self.history.append(state)

    def _write(self, control: LineControl, dtr: bool, rts: bool):
        control.set_lines(dtr, rts)
        if self.verbose:
            console.print(f"  [dim]{LineState(dtr, rts)}[/dim]")

    def reset(self, control: LineControl, bootloader_mode: bool) -> None:
        """
        在已開啟的裝置上執行三步重啟序列

        Raises:
            LineControlError: 控制線讀寫失敗，序列中止
        """
        # Step 1: EN 高電位，GPIO0 依模式設定
        console.print("Step 1: Setting up reset sequence...")
        self._write(control, dtr=False, rts=bootloader_mode)
        self._enter(ResetState.ARMED)
        self.sleep(self.timing.arm_delay)

        # Step 2: 拉低 EN 執行重啟，GPIO0 維持不變
        console.print("Step 2: Pulling EN low to reset...")
        lines = control.get_lines()
        self._write(control, dtr=True, rts=lines.rts)
        self._enter(ResetState.RESET_ASSERTED)
        self.sleep(self.timing.reset_delay)

        # Step 3: 釋放 EN，晶片依 GPIO0 電平啟動
        console.print("Step 3: Releasing EN to start...")
        lines = control.get_lines()
        self._write(control, dtr=False, rts=lines.rts)
        self._enter(ResetState.RELEASED)
        self.sleep(self.timing.boot_delay)

    def run(self, device_path: str, bootloader_mode: bool = False) -> int:
        """
        開啟裝置、執行重啟序列並關閉裝置

        Returns:
            int: 0 成功，-1 開啟或控制線失敗
        """
        self.history = []
        self.state = ResetState.CLOSED

        try:
            control = self.opener(device_path)
        except DeviceOpenError as e:
            err_console.print(f"[red]✗[/red] Failed to open serial device: {escape(str(e.reason))}")
            return -1
        self._enter(ResetState.OPENED)

        mode = "bootloader" if bootloader_mode else "normal"
        console.print(f"🔄 Resetting ESP32S3 into {mode} mode via RTS/DTR control...")

        try:
            self.reset(control, bootloader_mode)
        except LineControlError as e:
            err_console.print(f"[red]✗[/red] {escape(str(e))}")
            return -1
        finally:
            control.close()
            self._enter(ResetState.CLOSED)

        console.print("[green]✅ Reset sequence completed![/green]")
        if bootloader_mode:
            console.print("ESP32S3 should now be in bootloader mode for flashing.")
        else:
            console.print("ESP32S3 should now be running in normal mode.")
        return 0

