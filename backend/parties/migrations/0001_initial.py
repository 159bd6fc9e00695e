# Generated for the initial parties schema
import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


STATUS_CHOICES = [
    ("PENDING", "Pending"),
    ("APPROVED", "Approved"),
    ("REJECTED", "Rejected"),
    ("REMOVED", "Removed"),
]


def party_fields():
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
        ("email", models.EmailField(max_length=254)),
        ("name", models.CharField(blank=True, default="", max_length=200)),
        ("role", models.CharField(blank=True, default="", max_length=100)),
        ("status", models.CharField(choices=STATUS_CHOICES, default="PENDING", max_length=20)),
        ("responded_at", models.DateTimeField(blank=True, null=True)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
    ]


def invitation_fields():
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("email", models.EmailField(max_length=254)),
        ("name", models.CharField(blank=True, default="", max_length=200)),
        ("role", models.CharField(blank=True, default="", max_length=100)),
        ("percentage", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
        ("token_hash", models.CharField(max_length=255)),
        ("expires_at", models.DateTimeField()),
        ("accepted_at", models.DateTimeField(blank=True, null=True)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CompanyPartner",
            fields=party_fields() + [
                ("is_director", models.BooleanField(default=False)),
                ("is_shareholder", models.BooleanField(default=False)),
                ("share_count", models.PositiveIntegerField(blank=True, null=True)),
                ("ownership_percent", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="company_partners", to="accounts.account")),
            ],
            options={
                "ordering": ["created_at"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["account", "email"], name="company_partner_acct_email_idx"),
                    models.Index(fields=["email", "status"], name="company_partner_email_st_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PartnershipPartner",
            fields=party_fields() + [
                ("ownership_percent", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="partnership_partners", to="accounts.account")),
            ],
            options={
                "ordering": ["created_at"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["account", "email"], name="partnership_partner_acct_idx"),
                    models.Index(fields=["email", "status"], name="partnership_partner_st_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TrustPartner",
            fields=party_fields() + [
                ("beneficiary_percent", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="trust_partners", to="accounts.account")),
            ],
            options={
                "ordering": ["created_at"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["account", "email"], name="trust_partner_acct_email_idx"),
                    models.Index(fields=["email", "status"], name="trust_partner_email_st_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CompanyInvitation",
            fields=invitation_fields() + [
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="company_invitations", to="accounts.account")),
            ],
            options={
                "ordering": ["-created_at"],
                "abstract": False,
                "indexes": [models.Index(fields=["email", "expires_at"], name="company_invite_email_exp_idx")],
            },
        ),
        migrations.CreateModel(
            name="PartnershipInvitation",
            fields=invitation_fields() + [
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="partnership_invitations", to="accounts.account")),
            ],
            options={
                "ordering": ["-created_at"],
                "abstract": False,
                "indexes": [models.Index(fields=["email", "expires_at"], name="partnership_invite_email_idx")],
            },
        ),
        migrations.CreateModel(
            name="TrustInvitation",
            fields=invitation_fields() + [
                ("account", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="trust_invitations", to="accounts.account")),
            ],
            options={
                "ordering": ["-created_at"],
                "abstract": False,
                "indexes": [models.Index(fields=["email", "expires_at"], name="trust_invite_email_exp_idx")],
            },
        ),
    ]
