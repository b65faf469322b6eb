"""
串口 Modem 控制線 (DTR / RTS) 存取
透過 TIOCMGET / TIOCMSET 一次讀寫整個狀態字
"""

import fcntl
import struct
from dataclasses import dataclass

import serial
from serial.serialposix import TIOCMGET, TIOCMSET, TIOCM_DTR, TIOCM_RTS


class DeviceOpenError(Exception):
    """無法開啟串口裝置"""

    def __init__(self, port: str, reason):
        self.port = port
        self.reason = reason
        super().__init__(f"{port}: {reason}")


class LineControlError(Exception):
    """讀寫控制線失敗"""

    def __init__(self, action: str, port: str, reason):
        self.action = action
        self.port = port
        self.reason = reason
        super().__init__(f"Failed to {action} control lines on {port}: {reason}")


@dataclass(frozen=True)
class LineState:
    """DTR / RTS 的邏輯電平 (True = asserted)"""

    dtr: bool
    rts: bool

    @classmethod
    def from_status(cls, status: int) -> "LineState":
        return cls(dtr=bool(status & TIOCM_DTR), rts=bool(status & TIOCM_RTS))

    def apply(self, status: int) -> int:
        """回傳替換 DTR/RTS 位元後的狀態字，其他位元保持不變"""
        status &= ~(TIOCM_DTR | TIOCM_RTS)
        if self.dtr:
            status |= TIOCM_DTR
        if self.rts:
            status |= TIOCM_RTS
        return status

    def __str__(self):
        return f"DTR={int(self.dtr)} RTS={int(self.rts)}"


class LineControl:
    """
    控制線存取介面

    ResetSequencer 只依賴這幾個成員，測試時可以換成記憶體中的假物件。
    """

    port = None

    @property
    def is_open(self) -> bool:
        raise NotImplementedError

    def get_lines(self) -> LineState:
        raise NotImplementedError

    def set_lines(self, dtr: bool, rts: bool) -> None:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


class SerialLineControl(LineControl):
    """以 pyserial 開啟的串口裝置上的控制線"""

    def __init__(self, ser: serial.Serial):
        self.ser = ser
        self.port = ser.port

    @classmethod
    def open(cls, port: str) -> "SerialLineControl":
        """
        開啟串口裝置 (O_RDWR | O_NOCTTY，獨佔)

        pyserial 開啟時會把 termios 設為 9600 baud raw 模式、清空輸入緩衝區，
        並先以 TIOCMBIC 將 DTR/RTS 拉為 inactive。

        Args:
            port: 裝置路徑，例如 /dev/ttyCH343USB0

        Raises:
            DeviceOpenError: 裝置不存在、權限不足或被占用
        """
        ser = serial.Serial()
        ser.port = port
        ser.exclusive = True
        # 開啟時不要拉低 EN
        ser.dtr = False
        ser.rts = False
        try:
            ser.open()
        except (serial.SerialException, OSError) as e:
            raise DeviceOpenError(port, e) from e
        return cls(ser)

    @property
    def is_open(self) -> bool:
        return self.ser.is_open

    def _read_status(self) -> int:
        buf = fcntl.ioctl(self.ser.fileno(), TIOCMGET, struct.pack('I', 0))
        return struct.unpack('I', buf)[0]

    def get_lines(self) -> LineState:
        try:
            return LineState.from_status(self._read_status())
        except OSError as e:
            raise LineControlError("read", self.port, e) from e

    def set_lines(self, dtr: bool, rts: bool) -> None:
        # TIOCMSET 同時寫入 DTR 與 RTS，必須先讀回完整狀態字
        try:
            status = LineState(dtr, rts).apply(self._read_status())
            fcntl.ioctl(self.ser.fileno(), TIOCMSET, struct.pack('I', status))
        except OSError as e:
            raise LineControlError("set", self.port, e) from e

    def close(self) -> None:
        if self.ser.is_open:
            self.ser.close()
