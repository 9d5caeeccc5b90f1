"""
System info snapshot reported by the health endpoint.
"""

import os
import platform
import time

import psutil

START_TIME = time.time()


def get_system_status_snapshot() -> dict:
    """
    Return a minimal system status snapshot dict.
    """
    try:
        load1, load5, load15 = os.getloadavg()
    except (AttributeError, OSError):
        load1 = load5 = load15 = None

    memory = psutil.virtual_memory()
    return {
        "platform": f"{platform.system()} {platform.release()}",
        "cpuCores": psutil.cpu_count(),
        "cpuPercent": psutil.cpu_percent(interval=None),
        "memoryGb": round(memory.total / (1024 ** 3), 2),
        "memoryPercent": memory.percent,
        "processUptimeSeconds": int(time.time() - START_TIME),
        "loadAvg": {"1min": load1, "5min": load5, "15min": load15},
    }
