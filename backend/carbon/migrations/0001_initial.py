import django.core.validators
import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Activity',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('activity_type', models.CharField(max_length=100)),
                ('area', models.FloatField(blank=True, help_text='Area in acres where the practice was applied', null=True, validators=[django.core.validators.MinValueValidator(0)])),
                ('pesticide_used', models.CharField(blank=True, max_length=255, null=True)),
                ('pesticide_amount', models.FloatField(blank=True, help_text='Litres of pesticide used', null=True, validators=[django.core.validators.MinValueValidator(0)])),
                ('notes', models.TextField(blank=True, null=True)),
                ('photo_urls', models.JSONField(blank=True, default=list, help_text='Up to 3 evidence photos as data URIs')),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('Approved', 'Approved'), ('Rejected', 'Rejected')], db_index=True, default='Pending', max_length=10)),
                ('calculated_credits', models.FloatField(blank=True, null=True)),
                ('reward_points', models.FloatField(blank=True, null=True)),
                ('advice', models.TextField(blank=True, null=True)),
                ('climate_impact_analysis', models.TextField(blank=True, null=True)),
                ('verification_details', models.TextField(blank=True, null=True)),
                ('pesticide_analysis', models.TextField(blank=True, null=True)),
                ('proper_use_advice', models.TextField(blank=True, null=True)),
                ('used_fallback', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='activities', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'Activities',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='CreditAggregation',
            fields=[
                ('activity', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, primary_key=True, related_name='aggregation', serialize=False, to='carbon.activity')),
                ('credits', models.FloatField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='credit_aggregations', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='Suggestion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('suggestion_text', models.TextField()),
                ('is_read', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('related_activity', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='suggestion', to='carbon.activity')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='suggestions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
    ]
