from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='StoreEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('key', models.CharField(db_index=True, help_text="Discriminated key, e.g. 'voter_status:alice'.", max_length=255, unique=True)),
                ('value', models.JSONField(help_text='JSON-encoded value for this key.', null=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name_plural': 'store entries',
                'ordering': ['key'],
            },
        ),
    ]
