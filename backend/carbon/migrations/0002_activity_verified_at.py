from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('carbon', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='activity',
            name='verified_at',
            field=models.DateTimeField(blank=True, help_text='Set when a verifier approved a pending activity', null=True),
        ),
    ]
