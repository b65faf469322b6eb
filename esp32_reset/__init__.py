"""
ESP32S3 Reset Tools Package
透過 USB 轉串口晶片的 RTS/DTR 控制線重啟 ESP32S3 (一般模式或 bootloader 模式)
"""

from .lines import (
    DeviceOpenError,
    LineControl,
    LineControlError,
    LineState,
    SerialLineControl,
)
from .sequencer import (
    ARM_DELAY,
    BOOT_DELAY,
    RESET_DELAY,
    ResetSequencer,
    ResetState,
    ResetTiming,
)

__all__ = [
    'DeviceOpenError',
    'LineControl',
    'LineControlError',
    'LineState',
    'SerialLineControl',
    'ResetSequencer',
    'ResetState',
    'ResetTiming',
    'ARM_DELAY',
    'RESET_DELAY',
    'BOOT_DELAY',
]

__version__ = '1.0.0'
