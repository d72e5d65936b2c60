"""
Tests for the statusboard domain layer.

Tests cover:
- Project identity, ordering and configuration parsing
- Organization parsing
- Payload construction from API responses
- CrawlEvent payload checking
"""

import pytest

from statusboard.domain import (
    Activity,
    Commit,
    CrawlEvent,
    EventKind,
    Finished,
    Issue,
    Organization,
    Project,
    RepoFacts,
    error_event,
    finished_event,
)
from statusboard.errors import TransportError


class TestProject:
    """Tests for Project identity."""

    def test_equal_on_owner_and_name_only(self):
        a = Project('expressjs', 'express', package_name='express')
        b = Project('expressjs', 'express', primary_branch='master')
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_different_repos_not_equal(self):
        assert Project('expressjs', 'express') != Project('expressjs', 'router')
        assert Project('a', 'x') != Project('b', 'x')

    def test_ordering_by_identity(self):
        projects = [Project('b', 'a'), Project('a', 'b'), Project('a', 'a')]
        assert [p.repo for p in sorted(projects)] == ['a/a', 'a/b', 'b/a']

    def test_mutation_keeps_identity(self):
        project = Project('pillarjs', 'router')
        before = hash(project)
        project.package_name = 'router'
        project.primary_branch = 'master'
        assert hash(project) == before

    def test_key_prefix_and_repo(self):
        project = Project('jshttp', 'mime-types')
        assert project.key_prefix == 'jshttp:mime-types'
        assert project.repo == 'jshttp/mime-types'
        assert str(project) == 'jshttp/mime-types'


class TestProjectFromSpec:
    """Tests for parsing configured project entries."""

    def test_slug(self):
        project = Project.from_spec('nodejs/nodejs.dev')
        assert project.identity == ('nodejs', 'nodejs.dev')
        assert project.package_name is None

    def test_mapping_with_repo(self):
        project = Project.from_spec({
            'name': 'Express StatusBoard',
            'repo': 'expressjs/statusboard',
            'packageName': '@expressjs/statusboard',
            'primaryBranch': 'main',
        })
        assert project.identity == ('expressjs', 'statusboard')
        assert project.package_name == '@expressjs/statusboard'
        assert project.primary_branch == 'main'
        assert project.display_name == 'Express StatusBoard'

    def test_mapping_with_owner_and_name(self):
        project = Project.from_spec({'repoOwner': 'pkgjs', 'repoName': 'statusboard'})
        assert project.identity == ('pkgjs', 'statusboard')

    def test_project_passthrough(self):
        project = Project('a', 'b')
        assert Project.from_spec(project) is project

    @pytest.mark.parametrize('spec', ['express', 'a/b/c', '/x', '', {'name': 'no repo'}, 42])
    def test_invalid(self, spec):
        with pytest.raises(ValueError):
            Project.from_spec(spec)


class TestOrganization:
    def test_from_string_and_mapping(self):
        assert Organization.from_spec('expressjs') == Organization('expressjs')
        assert Organization.from_spec({'name': 'jshttp'}) == Organization('jshttp')

    def test_invalid(self):
        with pytest.raises(ValueError):
            Organization.from_spec({})


class TestPayloads:
    """Tests for building payloads from API responses."""

    def test_repo_facts_from_api_response(self):
        facts = RepoFacts.from_api_response({
            'name': 'express',
            'full_name': 'expressjs/express',
            'owner': {'login': 'expressjs'},
            'default_branch': 'master',
            'stargazers_count': 60000,
            'topics': ['web', 'framework'],
            'license': {'key': 'mit'},
        })
        assert facts.owner == 'expressjs'
        assert facts.default_branch == 'master'
        assert facts.stars == 60000
        assert facts.license_key == 'mit'
        assert facts.to_dict()['topics'] == ['web', 'framework']

    def test_repo_facts_null_license(self):
        facts = RepoFacts.from_api_response({'name': 'x', 'owner': {'login': 'o'}, 'license': None})
        assert facts.license_key is None
        assert facts.default_branch == 'main'

    def test_issue_from_graphql(self):
        issue = Issue.from_graphql({
            'number': 12,
            'title': 'Crash on start',
            'url': 'https://github.com/a/b/issues/12',
            'createdAt': '2024-01-01T00:00:00Z',
            'updatedAt': '2024-01-03T00:00:00Z',
            'author': None,
            'labels': {'nodes': [{'name': 'bug', 'color': 'ff0000'}]},
        })
        assert issue.number == 12
        assert issue.author is None
        assert issue.to_dict()['labels'] == [{'name': 'bug', 'color': 'ff0000'}]

    def test_issue_from_api_response(self):
        issue = Issue.from_api_response({
            'number': 3,
            'title': 'Docs',
            'html_url': 'https://github.com/a/b/issues/3',
            'user': {'login': 'wesleytodd'},
            'labels': [{'name': 'docs', 'color': '0000ff'}],
        })
        assert issue.author == 'wesleytodd'
        assert issue.labels[0].name == 'docs'

    def test_activity_and_commit(self):
        activity = Activity.from_api_response({
            'id': 123, 'type': 'PushEvent', 'actor': {'login': 'jonchurch'},
            'created_at': '2024-01-01T00:00:00Z', 'payload': {'size': 1},
        })
        assert activity.id == '123'
        assert activity.to_dict()['payload'] == {'size': 1}

        commit = Commit.from_api_response({
            'sha': 'abc123', 'node_id': 'C_kwDO',
            'commit': {'message': 'fix', 'author': {'name': 'Wes', 'date': '2024-01-01T00:00:00Z'}},
            'author': None,
        })
        assert commit.node_id == 'C_kwDO'
        assert commit.author == 'Wes'


class TestCrawlEvent:
    """Tests for the event tagged union."""

    def test_payload_type_checked(self):
        project = Project('a', 'b')
        with pytest.raises(TypeError):
            CrawlEvent(EventKind.ISSUE, project, {'number': 1})
        with pytest.raises(TypeError):
            CrawlEvent(EventKind.README, project, {'text': 'hi'})

    def test_error_event_carries_source_and_cause(self):
        cause = TransportError("boom")
        event = error_event(Project('a', 'b'), EventKind.ISSUE, cause)
        assert event.kind is EventKind.ERROR
        assert event.detail.source is EventKind.ISSUE
        assert event.detail.cause is cause
        assert event.detail.to_dict() == {'source': 'ISSUE', 'error': 'TransportError', 'message': 'boom'}

    def test_finished_event(self):
        event = finished_event(Project('a', 'b'), issues_truncated=True)
        assert event.kind is EventKind.FINISHED
        assert event.detail == Finished(issues_truncated=True)

    def test_events_are_immutable(self):
        event = finished_event(Project('a', 'b'))
        with pytest.raises(AttributeError):
            event.kind = EventKind.REPO
