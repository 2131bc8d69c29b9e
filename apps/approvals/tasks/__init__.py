from .send_escalation_reminders_task import send_escalation_reminders_task

__all__ = ['send_escalation_reminders_task']
