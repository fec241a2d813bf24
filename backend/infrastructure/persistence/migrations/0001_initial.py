from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='StoredCollection',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('version', models.PositiveIntegerField(default=1, verbose_name='Version')),
                ('name', models.CharField(max_length=100, unique=True, verbose_name='Collection')),
                ('documents', models.JSONField(blank=True, default=list, verbose_name='Documents')),
            ],
            options={
                'verbose_name': 'Stored collection',
                'verbose_name_plural': 'Stored collections',
                'db_table': 'ledger_collections',
                'ordering': ['name'],
            },
        ),
    ]
