import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="CacheEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("uri", models.CharField(max_length=2048)),
                ("site_id", models.PositiveIntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "HTML cache entry",
                "verbose_name_plural": "HTML cache entries",
            },
        ),
        migrations.CreateModel(
            name="HtmlCacheSettings",
            fields=[
                (
                    "singleton_key",
                    models.PositiveSmallIntegerField(default=1, editable=False, primary_key=True, serialize=False),
                ),
                ("enabled", models.BooleanField(default=True)),
                ("force_on", models.BooleanField(default=False)),
                ("cache_duration", models.PositiveIntegerField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "HTML cache settings",
                "verbose_name_plural": "HTML cache settings",
            },
        ),
        migrations.CreateModel(
            name="CacheDependency",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("content_unit", models.CharField(db_index=True, max_length=255)),
                (
                    "entry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="dependencies",
                        to="htmlcache.cacheentry",
                    ),
                ),
            ],
            options={
                "verbose_name": "HTML cache dependency",
                "verbose_name_plural": "HTML cache dependencies",
            },
        ),
        migrations.AddConstraint(
            model_name="cacheentry",
            constraint=models.UniqueConstraint(fields=("uri", "site_id"), name="htmlcache_unique_identity"),
        ),
        migrations.AddConstraint(
            model_name="cachedependency",
            constraint=models.UniqueConstraint(fields=("entry", "content_unit"), name="htmlcache_unique_dependency"),
        ),
    ]
