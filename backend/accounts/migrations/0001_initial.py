# Generated for the initial accounts schema
import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import accounts.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(default=False, help_text="Designates that this user has all permissions without explicitly assigning them.", verbose_name="superuser status")),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                ("is_staff", models.BooleanField(default=False, help_text="Designates whether the user can log into this admin site.", verbose_name="staff status")),
                ("is_active", models.BooleanField(default=True, help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.", verbose_name="active")),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("email", models.EmailField(max_length=254, unique=True, verbose_name="email address")),
                ("name", models.CharField(blank=True, default="", max_length=150)),
                ("groups", models.ManyToManyField(blank=True, help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.", related_name="user_set", related_query_name="user", to="auth.group", verbose_name="groups")),
                ("user_permissions", models.ManyToManyField(blank=True, help_text="Specific permissions for this user.", related_name="user_set", related_query_name="user", to="auth.permission", verbose_name="user permissions")),
            ],
            options={
                "verbose_name": "user",
                "verbose_name_plural": "users",
                "abstract": False,
            },
            managers=[
                ("objects", accounts.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("account_type", models.CharField(choices=[("INDIVIDUAL", "Individual"), ("COMPANY", "Company"), ("TRUST", "Trust"), ("PARTNERSHIP", "Partnership")], max_length=20)),
                ("name", models.CharField(max_length=200)),
                ("status", models.CharField(choices=[("DRAFT", "Draft"), ("PENDING", "Pending"), ("ACTIVE", "Active"), ("SUSPENDED", "Suspended"), ("CLOSED", "Closed")], default="DRAFT", max_length=20)),
                ("is_default", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="accounts", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Account",
                "verbose_name_plural": "Accounts",
                "indexes": [models.Index(fields=["owner", "status"], name="account_owner_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="IndividualProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tfn_ciphertext", models.TextField(blank=True, null=True)),
                ("tfn_digest", models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("first_name", models.CharField(blank=True, default="", max_length=100)),
                ("middle_name", models.CharField(blank=True, default="", max_length=100)),
                ("last_name", models.CharField(blank=True, default="", max_length=100)),
                ("date_of_birth", models.DateField(blank=True, null=True)),
                ("occupation", models.CharField(blank=True, default="", max_length=150)),
                ("address", models.CharField(blank=True, default="", max_length=255)),
                ("suburb", models.CharField(blank=True, default="", max_length=100)),
                ("state", models.CharField(blank=True, default="", max_length=10)),
                ("postcode", models.CharField(blank=True, default="", max_length=10)),
                ("account", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="individual_profile", to="accounts.account")),
            ],
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="CompanyProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tfn_ciphertext", models.TextField(blank=True, null=True)),
                ("tfn_digest", models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company_name", models.CharField(blank=True, default="", max_length=200)),
                ("trading_name", models.CharField(blank=True, default="", max_length=200)),
                ("abn", models.CharField(blank=True, default="", max_length=14)),
                ("acn", models.CharField(blank=True, default="", max_length=11)),
                ("business_address", models.CharField(blank=True, default="", max_length=255)),
                ("industry", models.CharField(blank=True, default="", max_length=150)),
                ("financial_year_end", models.CharField(blank=True, default="", max_length=5)),
                ("account", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="company_profile", to="accounts.account")),
            ],
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="TrustProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tfn_ciphertext", models.TextField(blank=True, null=True)),
                ("tfn_digest", models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("trust_name", models.CharField(blank=True, default="", max_length=200)),
                ("trust_type", models.CharField(blank=True, choices=[("DISCRETIONARY", "Discretionary"), ("UNIT", "Unit"), ("HYBRID", "Hybrid"), ("SMSF", "Self-managed super fund"), ("TESTAMENTARY", "Testamentary"), ("OTHER", "Other")], default="", max_length=20)),
                ("abn", models.CharField(blank=True, default="", max_length=14)),
                ("established_date", models.DateField(blank=True, null=True)),
                ("address", models.CharField(blank=True, default="", max_length=255)),
                ("account", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="trust_profile", to="accounts.account")),
            ],
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="PartnershipProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tfn_ciphertext", models.TextField(blank=True, null=True)),
                ("tfn_digest", models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("partnership_name", models.CharField(blank=True, default="", max_length=200)),
                ("trading_name", models.CharField(blank=True, default="", max_length=200)),
                ("abn", models.CharField(blank=True, default="", max_length=14)),
                ("business_address", models.CharField(blank=True, default="", max_length=255)),
                ("industry", models.CharField(blank=True, default="", max_length=150)),
                ("established_date", models.DateField(blank=True, null=True)),
                ("account", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="partnership_profile", to="accounts.account")),
            ],
            options={"abstract": False},
        ),
    ]
