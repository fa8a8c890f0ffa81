"""
sensorsmonitor - Hardware Sensor Summary Publisher

Polls hardware sensors, averages amdgpu and k10temp readings and publishes a
one-line summary through a named pipe for status bars and similar consumers.

Modules:
    - monitor: Main polling loop and command line entry point
    - adapters: Sensor backends (libsensors, psutil)
    - classifiers: Chip families and reading routing
    - aggregator: Per-family averages
    - renderer: Summary line formatting
    - channel: Named pipe lifecycle and publishing
    - utils: Configuration and logging helpers
"""

__version__ = "1.0.0"
__author__ = "sensorsmonitor Contributors"
__license__ = "Apache-2.0"
