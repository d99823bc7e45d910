# Generated manually
from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Vote',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('candidate', models.CharField(db_index=True, max_length=64)),
                ('fingerprint', models.CharField(help_text='Browser/device fingerprint', max_length=64)),
                ('ip_address', models.CharField(db_index=True, help_text='Resolved client IP address', max_length=64)),
                ('user_agent', models.TextField(blank=True, help_text='User agent string')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='VoteAttempt',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('ip_address', models.CharField(blank=True, db_index=True, max_length=64)),
                ('fingerprint_prefix', models.CharField(blank=True, max_length=16)),
                ('candidate', models.CharField(blank=True, max_length=100)),
                ('success', models.BooleanField(default=False, help_text='Whether the vote attempt was accepted')),
                ('reason', models.CharField(blank=True, help_text='Outcome reason', max_length=255)),
            ],
            options={
                'ordering': ['-timestamp'],
            },
        ),
        migrations.AddConstraint(
            model_name='vote',
            constraint=models.UniqueConstraint(fields=('fingerprint',), name='unique_vote_fingerprint'),
        ),
        migrations.AddIndex(
            model_name='vote',
            index=models.Index(fields=['ip_address', 'created_at'], name='vote_ip_created_idx'),
        ),
        migrations.AddIndex(
            model_name='vote',
            index=models.Index(fields=['ip_address', 'fingerprint'], name='vote_ip_fingerprint_idx'),
        ),
        migrations.AddIndex(
            model_name='voteattempt',
            index=models.Index(fields=['success', 'timestamp'], name='attempt_success_ts_idx'),
        ),
    ]
