from cricket_collector.forwarder.forwarder import Forwarder, SubmissionResult

__all__ = ["Forwarder", "SubmissionResult"]
