"""
Tests for writing crawl events to the store.
"""

from statusboard.crawler import iterate_projects
from statusboard.domain import (
    Activity,
    Commit,
    EventKind,
    Issue,
    Project,
    RepoFacts,
    error_event,
    finished_event,
    project_detail,
)
from statusboard.errors import TransportError
from statusboard.projector import event_key, event_value, project_events, write_event

from tests.fakes import issue_node

PROJECT = Project('expressjs', 'express')


def fixed_clock():
    return 1700000000000


class TestEventKey:
    def test_single_instance_kinds(self):
        repo = RepoFacts(owner='expressjs', name='express', full_name='expressjs/express')
        assert event_key(project_detail(EventKind.REPO, PROJECT, repo)) == 'expressjs:express:REPO'
        assert event_key(project_detail(EventKind.README, PROJECT, '# hi')) == 'expressjs:express:README'
        assert event_key(project_detail(EventKind.PACKUMENT, PROJECT, {})) == 'expressjs:express:PACKUMENT'

    def test_multi_instance_kinds_have_item_suffix(self):
        issue = Issue.from_graphql(issue_node(42))
        activity = Activity(id='123', type='PushEvent')
        commit = Commit(node_id='MDY6Q29tbWl0', sha='abc')

        assert event_key(project_detail(EventKind.ISSUE, PROJECT, issue)) == 'expressjs:express:ISSUE:42'
        assert event_key(project_detail(EventKind.ACTIVITY, PROJECT, activity)) == 'expressjs:express:ACTIVITY:123'
        assert event_key(project_detail(EventKind.COMMIT, PROJECT, commit)) == 'expressjs:express:COMMIT:MDY6Q29tbWl0'

    def test_finished_maps_to_last_updated(self):
        assert event_key(finished_event(PROJECT)) == 'expressjs:express:lastUpdated'

    def test_error_has_no_key(self):
        assert event_key(error_event(PROJECT, EventKind.README, TransportError("boom"))) is None


class TestEventValue:
    def test_finished_value_comes_from_clock(self):
        assert event_value(finished_event(PROJECT), clock=fixed_clock) == 1700000000000

    def test_payload_with_to_dict(self):
        value = event_value(project_detail(EventKind.ISSUE, PROJECT, Issue.from_graphql(issue_node(7))))
        assert value['number'] == 7
        assert value['title'] == 'Issue 7'

    def test_plain_payload_passes_through(self):
        assert event_value(project_detail(EventKind.README, PROJECT, '# express')) == '# express'
        assert event_value(project_detail(EventKind.TRAVIS, PROJECT, {'language': 'node_js'})) == {'language': 'node_js'}


class TestWriteEvent:
    def test_error_event_is_not_stored(self, memory_store):
        result = write_event(memory_store, error_event(PROJECT, EventKind.ISSUE, TransportError("502")))
        assert result is None
        assert memory_store.puts == []

    def test_returns_written_pair(self, memory_store):
        key, value = write_event(memory_store, project_detail(EventKind.README, PROJECT, '# x'))
        assert (key, value) == ('expressjs:express:README', '# x')
        assert memory_store.get(key) == '# x'


class TestProjectEvents:
    def test_one_put_per_non_error_event_in_order(self, memory_store):
        events = [
            project_detail(EventKind.README, PROJECT, '# x'),
            error_event(PROJECT, EventKind.TRAVIS, TransportError("reset")),
            project_detail(EventKind.ISSUE, PROJECT, Issue.from_graphql(issue_node(2))),
            project_detail(EventKind.ISSUE, PROJECT, Issue.from_graphql(issue_node(1))),
            finished_event(PROJECT),
        ]

        stats = project_events(memory_store, events, clock=fixed_clock)

        assert [key for key, _ in memory_store.puts] == [
            'expressjs:express:README',
            'expressjs:express:ISSUE:2',
            'expressjs:express:ISSUE:1',
            'expressjs:express:lastUpdated',
        ]
        assert stats.total_written == 4
        assert stats.errors == 1
        assert stats.failed_projects == {PROJECT}
        assert stats.finished == {PROJECT}

    def test_last_updated_is_each_projects_final_write(self, memory_store, sources, content, config):
        projects = [Project('o', 'a'), Project('o', 'b')]
        content.package_json[('o', 'a')] = {'name': 'a'}

        project_events(memory_store, iterate_projects(sources, projects, config), clock=fixed_clock)

        for project in projects:
            own = [key for key, _ in memory_store.puts if key.startswith(project.key_prefix + ':')]
            assert own[-1] == f"{project.key_prefix}:lastUpdated"
            assert memory_store.get(f"{project.key_prefix}:lastUpdated") == 1700000000000

    def test_same_input_same_keys(self, sources, github, config):
        from tests.fakes import MemoryStore

        github.open_issues[('o', 'r')] = 3
        first, second = MemoryStore(), MemoryStore()
        project_events(first, iterate_projects(sources, [Project('o', 'r')], config), clock=lambda: 1)
        project_events(second, iterate_projects(sources, [Project('o', 'r')], config), clock=lambda: 2)

        assert first.keys() == second.keys()
        changed = [k for k in first.keys() if first.get(k) != second.get(k)]
        assert changed == ['o:r:lastUpdated']

    def test_truncated_projects_are_reported(self, memory_store):
        stats = project_events(memory_store, [finished_event(PROJECT, issues_truncated=True)], clock=fixed_clock)
        assert stats.truncated == {PROJECT}
        assert stats.to_dict()['truncated'] == ['expressjs/express']

    def test_truncated_finish_never_indexed_writes_zero(self, memory_store):
        project_events(memory_store, [finished_event(PROJECT, issues_truncated=True)], clock=fixed_clock)
        assert memory_store.puts == [('expressjs:express:lastUpdated', 0)]

    def test_truncated_finish_keeps_previous_timestamp(self):
        from tests.fakes import MemoryStore

        store = MemoryStore({'expressjs:express:lastUpdated': 1600000000000})
        project_events(store, [finished_event(PROJECT, issues_truncated=True)], clock=fixed_clock)
        assert store.puts == [('expressjs:express:lastUpdated', 1600000000000)]

    def test_stats_to_dict(self, memory_store):
        stats = project_events(
            memory_store,
            [project_detail(EventKind.README, PROJECT, '# x'), finished_event(PROJECT)],
            clock=fixed_clock,
        )
        summary = stats.to_dict()
        assert summary['written'] == {'README': 1, 'FINISHED': 1}
        assert summary['total_written'] == 2
        assert summary['errors'] == 0
        assert summary['finished'] == ['expressjs/express']
