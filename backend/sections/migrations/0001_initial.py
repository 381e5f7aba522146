from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('materials', '0001_initial'),
        ('cogs', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Section',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_active', models.BooleanField(db_index=True, default=True, help_text='Cleared when the record is archived.')),
                ('archived_at', models.DateTimeField(blank=True, null=True)),
                ('name', models.CharField(max_length=100)),
                ('section_type', models.CharField(choices=[('kitchen', 'Kitchen'), ('bar', 'Bar'), ('storage', 'Storage'), ('bakery', 'Bakery'), ('other', 'Other')], default='kitchen', max_length=20)),
                ('description', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('archived_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='%(app_label)s_%(class)s_archived', to=settings.AUTH_USER_MODEL)),
                ('manager', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='managed_sections', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Section',
                'verbose_name_plural': 'Sections',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='SectionInventory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.DecimalField(decimal_places=6, default=0, max_digits=18)),
                ('reserved_quantity', models.DecimalField(decimal_places=6, default=0, max_digits=18)),
                ('min_level', models.DecimalField(decimal_places=6, default=0, max_digits=18)),
                ('max_level', models.DecimalField(decimal_places=6, default=0, max_digits=18)),
                ('last_updated', models.DateTimeField(auto_now=True)),
                ('material', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='section_inventory', to='materials.rawmaterial')),
                ('section', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='inventory', to='sections.section')),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Section Inventory',
                'verbose_name_plural': 'Section Inventory',
                'ordering': ['section', 'material__name'],
                'constraints': [
                    models.UniqueConstraint(fields=('section', 'material'), name='unique_section_material'),
                    models.CheckConstraint(condition=models.Q(('quantity__gte', 0)), name='section_inventory_quantity_non_negative'),
                    models.CheckConstraint(condition=models.Q(('reserved_quantity__gte', 0)), name='section_inventory_reserved_non_negative'),
                    models.CheckConstraint(condition=models.Q(('quantity__gte', models.F('reserved_quantity'))), name='section_inventory_reserved_within_quantity'),
                ],
            },
        ),
        migrations.CreateModel(
            name='SectionConsumption',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.DecimalField(decimal_places=6, max_digits=18)),
                ('reason', models.CharField(choices=[('selling', 'Selling'), ('recipe', 'Recipe'), ('waste', 'Waste'), ('staff_meal', 'Staff Meal'), ('spoilage', 'Spoilage'), ('other', 'Other')], default='other', max_length=20)),
                ('order_id', models.CharField(blank=True, db_index=True, max_length=100)),
                ('notes', models.TextField(blank=True)),
                ('consumed_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('consumed_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='section_consumptions', to=settings.AUTH_USER_MODEL)),
                ('material', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='section_consumptions', to='materials.rawmaterial')),
                ('recipe', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='consumptions', to='cogs.recipe')),
                ('section', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='consumptions', to='sections.section')),
            ],
            options={
                'verbose_name': 'Section Consumption',
                'verbose_name_plural': 'Section Consumptions',
                'ordering': ['-consumed_at'],
                'indexes': [models.Index(fields=['section', 'consumed_at'], name='consumption_section_date_idx'), models.Index(fields=['material', 'consumed_at'], name='consumption_material_date_idx')],
                'constraints': [models.CheckConstraint(condition=models.Q(('quantity__gt', 0)), name='consumption_quantity_positive')],
            },
        ),
    ]
