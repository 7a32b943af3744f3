"""Threshold alerts."""
from alerts.engine import ThresholdEvaluator
from alerts.rules_manager import RulesManager
from alerts.channels import LogChannel, ConsoleChannel, FileChannel
