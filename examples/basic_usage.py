#!/usr/bin/env python3
"""Basic usage example"""

import logging

from rolling_logger import RotatingLogWriterBuilder
from rolling_logger.monitoring import HealthChecker, InMemoryMonitor


def page_operator(alert):
    print(f"ALERT: {alert.summary()}")
    for path in alert.recent_files:
        print(f"  recent: {path}")


def main():
    logging.basicConfig(level=logging.INFO)
    monitor = InMemoryMonitor()

    # Create writer with builder pattern
    writer = (RotatingLogWriterBuilder()
        .with_base_name("updater")
        .with_directory("logs")
        .with_max_message_count(100)
        .with_max_duration(3600)
        .with_max_file_count(5)
        .with_alert_handler(page_operator)
        .with_monitoring(monitor)
        .build())

    # Append messages
    for attempt in range(250):
        writer.log_message("Checked for updates (attempt %d): up to date", attempt)
    writer.append("Shutting down")

    result = HealthChecker(writer).check()
    print(f"Health: {result.status.value} issues={result.issues}")
    print(f"Rollovers: {monitor.get_counter('rollovers')}")
    print(f"Active file: {writer.active_path}")

    writer.close()


if __name__ == "__main__":
    main()
