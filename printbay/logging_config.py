# printbay/logging_config.py

import logging
import os
import platform
import random
import sys
from datetime import datetime

import psutil


def configure_logging(level: str = "INFO"):
    """
    Configures the logging format and levels for the application.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("azure").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def startup_banner(integrations: dict | None = None):
    """
    Prints a styled startup banner with system info and which vendor
    integrations are live versus running on mock data.
    """
    boot_messages = [
        "🚀 Systems online. Let's print some orders!",
        "🖨 Warming up the resin vats...",
        "📦 The Printed Bay is open for business.",
        "🔧 Ready to quote, print and ship.",
    ]

    logger = logging.getLogger("uvicorn")

    sys_info = {
        "Python": sys.version.split()[0],
        "Platform": platform.system(),
        "Release": platform.release(),
        "CPU Cores": os.cpu_count(),
        "Memory": f"{round(psutil.virtual_memory().total / (1024 ** 3), 2)} GB",
        "Time": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
    }

    banner_line = "=" * 60
    logger.info(banner_line)
    logger.info(f"🎯 The Printed Bay API Startup: {random.choice(boot_messages)}")
    for k, v in sys_info.items():
        logger.info(f"{k}: {v}")
    for name, live in (integrations or {}).items():
        logger.info(f"{name}: {'✅ live' if live else '⚠️ mock data'}")
    logger.info(banner_line)
