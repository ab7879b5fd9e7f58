"""
Taxonomy resource descriptors.

Every catalog table is described once here; the repository, the bulk import
pipeline and the router are all driven from these descriptors, so adding a
resource means adding one `Resource` entry.

API field names keep the camelCase wire format the admin UI already uses;
columns are snake_case.
"""

from __future__ import annotations

from dataclasses import dataclass

STRING = "string"
NUMBER = "number"
INTEGER = "integer"
REFERENCE = "reference"

# Column ranges: INTEGER fields are Postgres `integer`, REFERENCE ids `bigint`.
INT4_MIN = -(2**31)
INT4_MAX = 2**31 - 1
BIGINT_MAX = 2**63 - 1


@dataclass(frozen=True)
class Reference:
    resource: str
    # Key of the nested parent object in hydrated records.
    include: str | None = None
    # Name used in "Los siguientes <label> no existen" messages.
    check_label: str | None = None


@dataclass(frozen=True)
class Field:
    name: str
    column: str
    kind: str
    required: bool = False
    reference: Reference | None = None

    @property
    def missing_label(self) -> str:
        if self.reference is not None and self.reference.check_label:
            return self.reference.check_label
        return f"{self.name}s"


@dataclass(frozen=True)
class UniqueField:
    """A non-key field that must also be unique (within the batch and the table)."""

    name: str
    duplicate_label: str
    existing_suffix: str


@dataclass(frozen=True)
class Labels:
    singular: str
    plural: str
    feminine: bool
    hint: str

    def _end(self, stem: str) -> str:
        return f"{stem}{'as' if self.feminine else 'os'}"

    @property
    def _article(self) -> str:
        return "las" if self.feminine else "los"

    def empty_batch(self) -> str:
        return f"Se requiere un array de {self.plural} no vacío"

    def invalid_rows(self, rows: list[int]) -> str:
        joined = ", ".join(str(r) for r in rows)
        return f"{self.plural.capitalize()} {self._end('inválid')} en las filas: {joined}. {self.hint}"

    def duplicates(self, values: list[str] | None = None) -> str:
        message = f"{self.plural.capitalize()} {self._end('duplicad')} {self._end('encontrad')}"
        if values:
            message += f": {', '.join(values)}"
        return message

    def missing(self, label: str, ids: list[int]) -> str:
        return f"Los siguientes {label} no existen: {', '.join(str(i) for i in ids)}"

    def existing(self, names: list[str], suffix: str = "") -> str:
        head = f"{self._article.capitalize()} siguientes {self.plural} ya existen"
        if suffix:
            head += f" {suffix}"
        return f"{head}: {', '.join(names)}"

    def created(self, count: int) -> str:
        return f"{count} {self.plural} {self._end('cread')} exitosamente"

    def bulk_failed(self) -> str:
        return f"Error al intentar crear {self._article} {self.plural} en lote"

    def not_found(self) -> str:
        return f"{self.singular.capitalize()} no {'encontrada' if self.feminine else 'encontrado'}"

    def failed(self, verb: str, *, many: bool = False) -> str:
        if many:
            return f"Error al intentar {verb} {self.plural}"
        article = "la" if self.feminine else "el"
        return f"Error al intentar {verb} {article} {self.singular}"


@dataclass(frozen=True)
class Resource:
    path: str
    plural_key: str
    table: str
    fields: tuple[Field, ...]
    natural_key: tuple[str, ...]
    order_by: str
    labels: Labels
    # Shown after a colliding name, e.g. "Dept ID" -> "Frutas (Dept ID: 3)".
    key_label: str | None = None
    unique_fields: tuple[UniqueField, ...] = ()
    # Overrides the natural-key duplicate/existing wording.
    key_unique: UniqueField | None = None

    def field(self, name: str) -> Field:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(f"{self.path} has no field {name!r}")

    @property
    def name_field(self) -> Field:
        return self.field(self.natural_key[0])

    @property
    def parent_key_field(self) -> Field | None:
        if len(self.natural_key) < 2:
            return None
        return self.field(self.natural_key[1])

    @property
    def references(self) -> tuple[Field, ...]:
        return tuple(f for f in self.fields if f.reference is not None)

    @property
    def includes(self) -> tuple[Field, ...]:
        return tuple(f for f in self.references if f.reference.include)


_MATERIAL_SLOTS = ("first", "second", "third", "fourth", "fifth")


def _material_fields() -> tuple[Field, ...]:
    fields: list[Field] = []
    for slot in _MATERIAL_SLOTS:
        fields.append(
            Field(
                f"{slot}MaterialTypeId",
                f"{slot}_material_type_id",
                REFERENCE,
                reference=Reference(
                    "materialImpacts",
                    include=f"{slot}MaterialType",
                    check_label="materialTypeIds",
                ),
            )
        )
        fields.append(Field(f"{slot}MaterialTypeQuantity", f"{slot}_material_type_quantity", NUMBER))
    return tuple(fields)


COUNTRIES = Resource(
    path="countries",
    plural_key="countries",
    table="countries",
    fields=(Field("country", "country", STRING, required=True),),
    natural_key=("country",),
    order_by="country",
    labels=Labels(
        singular="país",
        plural="países",
        feminine=False,
        hint="Verifique que todos tengan un nombre de país válido.",
    ),
)

REGIONS = Resource(
    path="regions",
    plural_key="regions",
    table="regions",
    fields=(
        Field("region", "region", STRING, required=True),
        Field("countryId", "country_id", REFERENCE, required=True, reference=Reference("countries", include="country")),
    ),
    natural_key=("region", "countryId"),
    order_by="region",
    key_label="Country ID",
    labels=Labels(
        singular="región",
        plural="regiones",
        feminine=True,
        hint="Verifique que todas tengan un nombre válido y un countryId.",
    ),
)

CITIES = Resource(
    path="cities",
    plural_key="cities",
    table="cities",
    fields=(
        Field("city", "city", STRING, required=True),
        Field("regionId", "region_id", REFERENCE, required=True, reference=Reference("regions", include="region")),
    ),
    natural_key=("city", "regionId"),
    order_by="city",
    key_label="Region ID",
    labels=Labels(
        singular="ciudad",
        plural="ciudades",
        feminine=True,
        hint="Verifique que todas tengan un nombre válido y un regionId.",
    ),
)

COUNTIES = Resource(
    path="counties",
    plural_key="counties",
    table="counties",
    fields=(
        Field("county", "county", STRING, required=True),
        Field("cityId", "city_id", REFERENCE, required=True, reference=Reference("cities", include="city")),
    ),
    natural_key=("county", "cityId"),
    order_by="county",
    key_label="City ID",
    labels=Labels(
        singular="comuna",
        plural="comunas",
        feminine=True,
        hint="Verifique que todas tengan un nombre válido y un cityId.",
    ),
)

DEPARTMENTS = Resource(
    path="departments",
    plural_key="departments",
    table="departments",
    fields=(Field("departmentName", "department_name", STRING, required=True),),
    natural_key=("departmentName",),
    order_by="departmentName",
    labels=Labels(
        singular="departamento",
        plural="departamentos",
        feminine=False,
        hint="Verifique que todos tengan un departmentName válido.",
    ),
)

DEPARTMENT_CATEGORIES = Resource(
    path="departmentCategories",
    plural_key="departmentCategories",
    table="department_categories",
    fields=(
        Field("departmentCategoryName", "department_category_name", STRING, required=True),
        Field(
            "departmentId",
            "department_id",
            REFERENCE,
            required=True,
            reference=Reference("departments", include="department"),
        ),
    ),
    natural_key=("departmentCategoryName", "departmentId"),
    order_by="departmentCategoryName",
    key_label="Dept ID",
    labels=Labels(
        singular="categoría de departamento",
        plural="categorías de departamentos",
        feminine=True,
        hint="Verifique que todas tengan un nombre válido y un departmentId.",
    ),
)

PRODUCT_CATEGORIES = Resource(
    path="productCategories",
    plural_key="productCategories",
    table="product_categories",
    fields=(
        Field("productCategoryName", "product_category_name", STRING, required=True),
        Field(
            "departmentCategoryId",
            "department_category_id",
            REFERENCE,
            required=True,
            reference=Reference("departmentCategories"),
        ),
        Field("keywords", "keywords", STRING),
        Field("averageWeight", "average_weight", NUMBER),
        *_material_fields(),
        Field("size", "size", STRING),
        Field("weightUnit", "weight_unit", STRING),
    ),
    natural_key=("productCategoryName", "departmentCategoryId"),
    order_by="productCategoryName",
    key_label="Dept Cat ID",
    labels=Labels(
        singular="categoría de producto",
        plural="categorías de productos",
        feminine=True,
        hint="Verifique que todas tengan un nombre válido y un departmentCategoryId.",
    ),
)

USER_CATEGORIES = Resource(
    path="userCategories",
    plural_key="userCategories",
    table="user_categories",
    fields=(
        Field("name", "name", STRING, required=True),
        Field("level", "level", INTEGER, required=True),
        Field("categoryDiscountAmount", "category_discount_amount", NUMBER, required=True),
        Field("pointsThreshold", "points_threshold", INTEGER, required=True),
    ),
    natural_key=("name",),
    order_by="level",
    key_unique=UniqueField("name", "Nombres de categorías", "por nombre"),
    unique_fields=(UniqueField("level", "Niveles de categorías", "por nivel"),),
    labels=Labels(
        singular="categoría de usuario",
        plural="categorías de usuario",
        feminine=True,
        hint="Verifique que todas tengan name, level, categoryDiscountAmount y pointsThreshold válidos.",
    ),
)

MATERIAL_IMPACTS = Resource(
    path="materialImpacts",
    plural_key="materialImpacts",
    table="material_impact_estimates",
    fields=(
        Field("materialType", "material_type", STRING, required=True),
        Field("estimatedCo2SavingsKG", "estimated_co2_savings_kg", NUMBER, required=True),
        Field("estimatedWaterSavingsLT", "estimated_water_savings_lt", NUMBER, required=True),
    ),
    natural_key=("materialType",),
    order_by="materialType",
    labels=Labels(
        singular="estimación de impacto de material",
        plural="estimaciones de impacto de materiales",
        feminine=True,
        hint="Verifique que todas tengan materialType, estimatedCo2SavingsKG y estimatedWaterSavingsLT válidos.",
    ),
)

RESOURCES: dict[str, Resource] = {
    r.path: r
    for r in (
        COUNTRIES,
        REGIONS,
        CITIES,
        COUNTIES,
        DEPARTMENTS,
        DEPARTMENT_CATEGORIES,
        PRODUCT_CATEGORIES,
        USER_CATEGORIES,
        MATERIAL_IMPACTS,
    )
}


def get(path: str) -> Resource:
    return RESOURCES[path]
