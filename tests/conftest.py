from datetime import date

import pytest

from aquasure.hmpi.models import Alert, Policy, Project, Sample, Severity
from aquasure.hmpi.standards import STANDARDS


SAMPLE_RECORDS = [
    {"sample_id": "GNG-001", "project_id": "p1", "metal": "Lead", "si": 0.09, "ii": 0.3, "mi": 0.7,
     "latitude": 25.3176, "longitude": 82.9739, "district": "Varanasi", "city": "Varanasi", "date": "2025-01-12"},
    {"sample_id": "YMN-004", "project_id": "p2", "metal": "Arsenic", "si": 0.05, "ii": 0.2, "mi": 0.5,
     "latitude": 28.7041, "longitude": 77.1025, "district": "New Delhi", "city": "Delhi", "date": "2025-02-07"},
    {"sample_id": "CVR-007", "project_id": "p3", "metal": "Chromium", "si": 0.03, "ii": 0.1, "mi": 0.4,
     "latitude": 12.2958, "longitude": 76.6394, "district": "Mysuru", "city": "Karnataka", "date": "2025-03-05"},
    {"sample_id": "GNG-002", "project_id": "p1", "metal": "Mercury", "si": 0.012, "ii": 0.25, "mi": 0.6,
     "latitude": 25.2677, "longitude": 82.9890, "district": "Varanasi", "city": "Varanasi", "date": "2025-01-15"},
    {"sample_id": "YMN-005", "project_id": "p2", "metal": "Cadmium", "si": 0.008, "ii": 0.15, "mi": 0.45,
     "latitude": 28.6519, "longitude": 77.2315, "district": "New Delhi", "city": "Delhi", "date": "2025-02-10"},
    {"sample_id": "NRM-001", "project_id": "p4", "metal": "Lead", "si": 0.15, "ii": 0.4, "mi": 0.8,
     "latitude": 21.7051, "longitude": 72.9960, "district": "Bharuch", "city": "Gujarat", "date": "2025-01-28"},
    {"sample_id": "GDV-003", "project_id": "p5", "metal": "Arsenic", "si": 0.035, "ii": 0.18, "mi": 0.52,
     "latitude": 19.9975, "longitude": 73.7898, "district": "Nashik", "city": "Maharashtra", "date": "2025-02-18"},
]

PROJECT_RECORDS = [
    {"project_id": "p1", "name": "Ganga Water Quality Study - Varanasi",
     "district": "Varanasi", "city": "Varanasi", "policy_threshold_hmpi": 100},
    {"project_id": "p2", "name": "Yamuna Water Quality Study - Delhi",
     "district": "New Delhi", "city": "Delhi", "policy_threshold_hmpi": 80},
    {"project_id": "p3", "name": "Cauvery Water Quality Study - Karnataka",
     "district": "Mysuru", "city": "Karnataka", "policy_threshold_hmpi": 90},
    {"project_id": "p4", "name": "Narmada Water Quality Assessment - Gujarat",
     "district": "Bharuch", "city": "Gujarat", "policy_threshold_hmpi": 85},
    {"project_id": "p5", "name": "Godavari River Monitoring - Maharashtra",
     "district": "Nashik", "city": "Maharashtra", "policy_threshold_hmpi": 95},
]


def make_sample(sample_id="S-1", project_id="p1", metal="Lead", si=0.09, ii=0.3, mi=0.7,
                when="2025-01-12", district="Varanasi", **extra):
    return Sample(sample_id=sample_id, project_id=project_id, metal=metal, si=si, ii=ii, mi=mi,
                  date=when, district=district, **extra)


@pytest.fixture
def sample_factory():
    return make_sample


@pytest.fixture
def samples():
    return [Sample.from_record(r) for r in SAMPLE_RECORDS]


@pytest.fixture
def projects():
    return {r["project_id"]: Project.from_record(r) for r in PROJECT_RECORDS}


@pytest.fixture
def standards():
    return STANDARDS


class InMemoryRepository:
    """Stands in for SupabaseRepository in API and job tests."""

    def __init__(self, samples=(), projects=None, alerts=()):
        self.samples = list(samples)
        self.projects = dict(projects or {})
        self.alerts = list(alerts)
        self.policies = []
        self.thresholds = {}

    def list_samples(self, project_id=None, metal=None, district=None):
        return [
            s for s in self.samples
            if (project_id is None or s.project_id == project_id)
            and (metal is None or s.metal == metal)
            and (district is None or s.district == district)
        ]

    def list_projects(self):
        return dict(self.projects)

    def get_project(self, project_id):
        return self.projects.get(project_id)

    def list_alerts(self, project_id=None):
        return [a for a in self.alerts if project_id is None or a.project_id == project_id]

    def list_policies(self):
        return list(self.policies)

    def insert_samples(self, samples):
        self.samples.extend(samples)
        return [s.to_record() for s in samples]

    def insert_alerts(self, alerts):
        self.alerts.extend(alerts)
        return [a.to_record() for a in alerts]

    def acknowledge_alert(self, alert_id, acknowledged=True):
        for i, alert in enumerate(self.alerts):
            if alert.id == alert_id:
                record = alert.to_record()
                record["acknowledged"] = acknowledged
                self.alerts[i] = Alert.from_record(record)
                return record
        return None

    def insert_policy(self, name, metal, threshold, created_by=""):
        policy = Policy(id=f"pol{len(self.policies) + 1}", name=name, metal=metal,
                        threshold=threshold, created_by=created_by)
        self.policies.append(policy)
        return policy

    def update_project_threshold(self, project_id, threshold):
        if project_id not in self.projects:
            return None
        self.thresholds[project_id] = threshold
        return {"project_id": project_id, "policy_threshold_hmpi": threshold}


@pytest.fixture
def repository(samples, projects):
    open_alert = Alert(project_id="p1", sample_id="GNG-001", message="Lead above BBI",
                       severity=Severity.MEDIUM, id="a1")
    closed_alert = Alert(project_id="p2", sample_id="YMN-004", message="Arsenic at BBI",
                         severity=Severity.MEDIUM, acknowledged=True, id="a2")
    return InMemoryRepository(samples, projects, [open_alert, closed_alert])


@pytest.fixture
def today():
    return date(2025, 3, 1)
