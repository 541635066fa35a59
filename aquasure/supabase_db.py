import logging

from supabase import create_client

from aquasure import config
from aquasure.hmpi.models import Alert, Policy, Project, Sample

logger = logging.getLogger(__name__)

_client = None


def get_client():
    """Create the Supabase client on first use."""
    global _client
    if _client is None:
        if not config.SUPABASE_URL or not config.SUPABASE_KEY:
            raise RuntimeError("SUPABASE_URL / SUPABASE_KEY not set in environment or .env")
        _client = create_client(config.SUPABASE_URL, config.SUPABASE_KEY)
    return _client


class SupabaseRepository:
    """
    Read/write access to the `samples`, `projects`, `alerts` and `policies`
    tables. Rows are turned into domain records on the way out; a stored
    sample that fails validation is logged and left out.
    """

    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = get_client()
        return self._client

    def _select(self, table, **filters):
        query = self.client.table(table).select("*")
        for column, value in filters.items():
            if value is not None:
                query = query.eq(column, value)
        response = query.order("created_at", desc=True).execute()
        return response.data or []

    def _build_all(self, table, rows, build, key):
        # malformed stored rows are logged and skipped
        built = []
        for row in rows:
            try:
                built.append(build(row))
            except ValueError as e:
                logger.warning("Skipping stored %s row %s: %s", table, row.get(key), e)
        return built

    # ---------------- reads ----------------
    def list_samples(self, project_id=None, metal=None, district=None):
        rows = self._select("samples", project_id=project_id, metal=metal, district=district)
        return self._build_all("samples", rows, Sample.from_record, "sample_id")

    def list_projects(self):
        projects = self._build_all(
            "projects",
            self._select("projects"),
            lambda row: Project.from_record(row, default_threshold=config.DEFAULT_POLICY_THRESHOLD),
            "project_id",
        )
        return {p.project_id: p for p in projects}

    def get_project(self, project_id):
        return self.list_projects().get(project_id)

    def list_policies(self):
        return self._build_all("policies", self._select("policies"), Policy.from_record, "id")

    def list_alerts(self, project_id=None):
        rows = self._select("alerts", project_id=project_id)
        return self._build_all("alerts", rows, Alert.from_record, "id")

    # ---------------- writes ----------------
    def insert_samples(self, samples):
        records = [s.to_record() for s in samples]
        if not records:
            return []
        return self.client.table("samples").insert(records).execute().data or []

    def insert_alerts(self, alerts):
        records = [a.to_record() for a in alerts]
        if not records:
            return []
        return self.client.table("alerts").insert(records).execute().data or []

    def acknowledge_alert(self, alert_id, acknowledged=True):
        response = (
            self.client.table("alerts")
            .update({"acknowledged": acknowledged})
            .eq("id", alert_id)
            .execute()
        )
        return response.data[0] if response.data else None

    def insert_policy(self, name, metal, threshold, created_by=""):
        record = {"name": name, "metal": metal, "threshold": threshold, "created_by": created_by}
        response = self.client.table("policies").insert(record).execute()
        return Policy.from_record(response.data[0]) if response.data else None

    def update_project_threshold(self, project_id, threshold):
        response = (
            self.client.table("projects")
            .update({"policy_threshold_hmpi": threshold})
            .eq("project_id", project_id)
            .execute()
        )
        return response.data[0] if response.data else None
