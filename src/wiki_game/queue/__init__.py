from .base import Delivery, WorkQueue, parse_body
from .memory_queue import InMemoryQueue
from .sqs_queue import SQSQueue

__all__ = ["Delivery", "WorkQueue", "parse_body", "InMemoryQueue", "SQSQueue"]
