import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Asset',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('filename', models.CharField(help_text='Sanitized original filename', max_length=200)),
                ('mime', models.CharField(help_text='MIME type declared by the uploader', max_length=255)),
                ('size', models.BigIntegerField(help_text='Declared file size in bytes')),
                ('storage_path', models.CharField(help_text='Path in storage: private/{owner_id}/{yyyy}/{mm}/{id}-{name}', max_length=512, unique=True)),
                ('sha256', models.CharField(blank=True, help_text='Server-computed SHA256, set on finalize', max_length=64, null=True)),
                ('status', models.CharField(choices=[('uploading', 'Uploading'), ('ready', 'Ready'), ('corrupt', 'Corrupt')], db_index=True, default='uploading', max_length=16)),
                ('version', models.PositiveIntegerField(default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assets', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Asset',
                'verbose_name_plural': 'Assets',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['owner', '-created_at'], name='assets_owner_recent_idx')],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('version__gte', 1)), name='assets_version_positive'),
                    models.CheckConstraint(condition=models.Q(('size__gt', 0)), name='assets_size_positive'),
                ],
            },
        ),
        migrations.CreateModel(
            name='UploadTicket',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nonce', models.CharField(max_length=64)),
                ('mime', models.CharField(max_length=255)),
                ('size', models.BigIntegerField()),
                ('storage_path', models.CharField(max_length=512)),
                ('expires_at', models.DateTimeField(db_index=True)),
                ('used', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('asset', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='upload_ticket', to='assets.asset')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='upload_tickets', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Upload Ticket',
                'verbose_name_plural': 'Upload Tickets',
            },
        ),
        migrations.CreateModel(
            name='AssetShare',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('can_download', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('asset', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='shares', to='assets.asset')),
                ('to_user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='shared_assets', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Asset Share',
                'verbose_name_plural': 'Asset Shares',
                'constraints': [models.UniqueConstraint(fields=('asset', 'to_user'), name='asset_share_unique_grantee')],
            },
        ),
    ]
