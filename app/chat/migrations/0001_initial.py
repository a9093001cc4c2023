import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Room",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created"),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified"),
                ),
                ("name", models.CharField(help_text="Display name of the room", max_length=255)),
                (
                    "description",
                    models.TextField(blank=True, default="", help_text="Optional description shown in the room header"),
                ),
                (
                    "room_type",
                    models.CharField(
                        choices=[("general", "General"), ("support", "Support"), ("class", "Class"), ("private", "Private")],
                        db_index=True,
                        default="general",
                        help_text="Type of room (general, support, class or private)",
                        max_length=10,
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(db_index=True, default=True, help_text="Inactive rooms are hidden from every chat operation"),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="User who created this room (null for seeded rooms)",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_rooms",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_room",
                "ordering": ["-updated_at", "-created_at"],
                "indexes": [models.Index(fields=["room_type", "is_active"], name="chat_room_type_active_idx")],
            },
        ),
        migrations.CreateModel(
            name="Message",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "is_deleted",
                    models.BooleanField(db_index=True, default=False, help_text="Whether this record has been soft deleted"),
                ),
                (
                    "deleted_at",
                    models.DateTimeField(blank=True, help_text="Timestamp when this record was soft deleted", null=True),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created"),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified"),
                ),
                (
                    "content",
                    models.TextField(blank=True, help_text="Message text (null for attachment-only messages)", null=True),
                ),
                (
                    "message_type",
                    models.CharField(
                        choices=[("text", "Text"), ("image", "Image"), ("file", "File"), ("system", "System")],
                        db_index=True,
                        default="text",
                        help_text="Type of message (text, image, file or system)",
                        max_length=10,
                    ),
                ),
                (
                    "attachment_url",
                    models.URLField(blank=True, help_text="Location of the attached file", max_length=1024, null=True),
                ),
                (
                    "attachment_name",
                    models.CharField(blank=True, help_text="Original file name of the attachment", max_length=255, null=True),
                ),
                (
                    "delivered_at",
                    models.DateTimeField(
                        blank=True, help_text="When the message was first delivered (never overwritten)", null=True
                    ),
                ),
                (
                    "edited_at",
                    models.DateTimeField(blank=True, help_text="Timestamp when message was last edited", null=True),
                ),
                (
                    "seen_at",
                    models.DateTimeField(
                        blank=True, help_text="When the most recent reader marked this message as read", null=True
                    ),
                ),
                (
                    "room",
                    models.ForeignKey(
                        help_text="Room this message belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="chat.room",
                    ),
                ),
                (
                    "sender",
                    models.ForeignKey(
                        blank=True,
                        help_text="User who sent this message (null for system messages)",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="chat_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_message",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["room", "created_at", "id"], name="chat_msg_room_created_idx"),
                    models.Index(fields=["sender", "-created_at"], name="chat_msg_sender_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Participant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created"),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified"),
                ),
                (
                    "is_active",
                    models.BooleanField(db_index=True, default=True, help_text="False after the user leaves; reactivated on rejoin"),
                ),
                (
                    "joined_at",
                    models.DateTimeField(default=django.utils.timezone.now, help_text="When the user last joined this room"),
                ),
                (
                    "last_seen_at",
                    models.DateTimeField(blank=True, help_text="Last time the user marked the room as read", null=True),
                ),
                (
                    "room",
                    models.ForeignKey(
                        help_text="Room this participation belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="participants",
                        to="chat.room",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="User participating in the room",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="room_participations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_participant",
                "ordering": ["joined_at"],
                "indexes": [
                    models.Index(fields=["room", "is_active"], name="chat_part_room_active_idx"),
                    models.Index(fields=["user", "is_active"], name="chat_part_user_active_idx"),
                ],
                "constraints": [models.UniqueConstraint(fields=("room", "user"), name="unique_room_participant")],
            },
        ),
        migrations.CreateModel(
            name="MessageRead",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "read_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now, help_text="When the user last marked the message as read"
                    ),
                ),
                (
                    "message",
                    models.ForeignKey(
                        help_text="Message that was read",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reads",
                        to="chat.message",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="Reader",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="message_reads",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_message_read",
                "ordering": ["read_at"],
                "constraints": [models.UniqueConstraint(fields=("message", "user"), name="unique_message_read")],
            },
        ),
    ]
