"""
Project registry for statusboard.

Resolves configured organizations and explicit projects into one
deduplicated list of Project identities.
"""

import logging
from typing import Any, Dict, Iterable, List

from .domain import Project, Organization
from .errors import SourceFetchError

logger = logging.getLogger(__name__)


def get_org_projects(client, orgs: Iterable[Organization]) -> List[Project]:
    """
    List every repository of every organization as a Project.

    An organization that cannot be listed is logged and skipped; the
    projects already collected for it are discarded so a partial listing
    never looks complete.
    """
    results: List[Project] = []
    for org in orgs:
        try:
            org_projects = [
                Project(repo_owner=repo.owner or org.name, repo_name=repo.name)
                for repo in client.list_org_repos(org.name)
            ]
        except SourceFetchError as e:
            logger.error(f"Could not list repositories for org {org.name}: {e}")
            continue
        logger.debug(f"Org {org.name}: {len(org_projects)} repositories")
        results.extend(org_projects)
    return results


def dedupe_projects(projects: Iterable[Project]) -> List[Project]:
    """
    Deduplicate on (owner, name), keeping first-seen order.

    A later duplicate only fills in fields the kept entry is missing.
    """
    seen: Dict[Project, Project] = {}
    for project in projects:
        kept = seen.get(project)
        if kept is None:
            seen[project] = project
            continue
        kept.package_name = kept.package_name or project.package_name
        kept.primary_branch = kept.primary_branch or project.primary_branch
        kept.display_name = kept.display_name or project.display_name
    return list(seen.values())


def get_all_projects(client, config: Dict[str, Any]) -> List[Project]:
    """
    Resolve every project this board tracks.

    Explicit `projects` entries come first so their configured package
    names and branches win over the bare org listing.

    Args:
        client: GitHubClient (or anything with list_org_repos)
        config: Loaded configuration

    Returns:
        Deduplicated list of projects
    """
    explicit = [Project.from_spec(spec) for spec in config.get('projects') or []]
    orgs = [Organization.from_spec(spec) for spec in config.get('orgs') or []]

    projects = dedupe_projects(explicit + get_org_projects(client, orgs))
    logger.info(f"Registry: {len(projects)} projects from {len(orgs)} orgs and {len(explicit)} explicit entries")
    return projects
