# core/email_templates.py
"""
Notification templates rendered by EmailTemplateEngine

Templates are HTML fragments with inline styles; the engine escapes every
variable, so submission fields can be passed in as received.
"""

ADMIN_NOTIFICATION_SUBJECT = "New Contact Form Submission: {{ submission.subject }}"

ADMIN_NOTIFICATION_HTML = """
<div style="font-family: Arial, sans-serif; color: #333333; max-width: 600px;">
  <h2 style="color: #2c3e50;">New Contact Form Submission</h2>
  <p><strong>Name:</strong> {{ submission.name }}</p>
  <p><strong>Email:</strong> <a href="mailto:{{ submission.email }}">{{ submission.email }}</a></p>
  <p><strong>Subject:</strong> {{ submission.subject }}</p>
  <p><strong>Message:</strong></p>
  <p style="padding: 12px; background-color: #f7f7f7; border-left: 3px solid #2c3e50;">{{ submission.message | email_safe }}</p>
  <hr>
  <p><small>Submission ID: {{ submission.id if submission.id is not none else 'N/A' }}</small></p>
  <p><small>Submitted at: {{ submission.createdAt | datetime }}</small></p>
</div>
"""

USER_CONFIRMATION_SUBJECT = "We received your message - {{ site_name }}"

USER_CONFIRMATION_HTML = """
<div style="font-family: Arial, sans-serif; color: #333333; max-width: 600px;">
  <h2 style="color: #2c3e50;">Thank you for contacting {{ site_name }}!</h2>
  <p>Hi {{ submission.name }},</p>
  <p>We have received your message and will get back to you as soon as possible.</p>
  <hr>
  <p><strong>Your Message Details:</strong></p>
  <p><strong>Subject:</strong> {{ submission.subject }}</p>
  <p><strong>Submitted on:</strong> {{ submission.createdAt | datetime }}</p>
  <hr>
  <p>Best regards,<br>{{ site_name }} Team</p>
  <p><small>This is an automated message. Please do not reply to this email.</small></p>
</div>
"""
