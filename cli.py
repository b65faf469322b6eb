#!/usr/bin/env python3
"""
ESP32S3 硬體重啟 CLI 工具
透過 CH343 等 USB 轉串口晶片的 RTS/DTR 控制線重啟 ESP32S3，使用 Rich 美化終端輸出
"""

import sys

import click
from rich.console import Console
from rich.markup import escape

from esp32_reset import ResetSequencer, __version__

console = Console()
err_console = Console(stderr=True, soft_wrap=True)

PROG_NAME = 'esp32s3-reset'
EXAMPLE_PORT = '/dev/ttyCH343USB0'


def print_usage(prog_name=PROG_NAME):
    """顯示使用方式 (標準輸出)"""
    console.print(f"Usage: {prog_name} <serial_device> [bootloader]", markup=False, highlight=False)
    console.print(f"Example: {prog_name} {EXAMPLE_PORT}          # Normal boot", markup=False, highlight=False)
    console.print(f"Example: {prog_name} {EXAMPLE_PORT} bootloader # Bootloader mode", markup=False, highlight=False)


@click.command(name=PROG_NAME)
@click.argument('serial_device')
@click.argument('mode', required=False)
@click.option('--verbose', '-v', is_flag=True, help='每次寫入後顯示 DTR/RTS 電平')
@click.version_option(version=__version__, prog_name='ESP32S3 Reset')
def reset(serial_device, mode, verbose):
    """
    重啟 ESP32S3 (一般模式或 bootloader 模式)

    範例:
        esp32s3-reset /dev/ttyCH343USB0
        esp32s3-reset /dev/ttyCH343USB0 bootloader
    """
    bootloader_mode = mode == 'bootloader'
    if mode is not None and not bootloader_mode:
        console.print(f"[yellow]⚠[/yellow] Unknown mode '{escape(mode)}', using normal boot")

    sequencer = ResetSequencer(verbose=verbose)
    return sequencer.run(serial_device, bootloader_mode)


def main(argv=None):
    """
    執行 CLI 並回傳結束碼

    Returns:
        int: 0 成功，-1 參數錯誤或重啟失敗
    """
    if argv is None:
        argv = sys.argv[1:]

    try:
        code = reset.main(args=list(argv), prog_name=PROG_NAME, standalone_mode=False)
    except click.UsageError as e:
        print_usage()
        console.print(f"[dim]{escape(e.format_message())}[/dim]")
        return -1
    except click.Abort:
        err_console.print("[red]✗[/red] Aborted")
        return -1

    return code if code is not None else 0


def run():
    sys.exit(main())


if __name__ == '__main__':
    run()
