"""
Command-line harness for the telemetry client.
"""
