# avtool

`avtool` is a library for tools that manage stacks of Git branches and their
GitHub pull requests. It has three parts:

- `avtool.git`: a thin, typed layer over the `git` command line. It covers
  refs, `cat-file`, cherry-picks, diffs, logs, rev-lists, rebases with parsed
  results, porcelain status and JSON state files kept under `.git/av`.
- `avtool.gh`: a small GitHub GraphQL client with queries and mutations for
  pull requests, repositories, teams, users and the viewer.
- Utilities: launching the user's editor (`avtool.editor`), the per-user state
  file (`avtool.userstate`), a cached check for the latest release
  (`avtool.version`) and the authentication check for the Aviator API
  (`avtool.avgql`).

It needs Python 3.10 or later and a `git` executable on `PATH`. It has no
third-party runtime dependencies.

## Installation

```sh
pip install .
```

To run the test suite:

```sh
pip install ".[test]"
pytest
```

## Working with a repository

```python
from avtool.git.repo import Repo, GitError

repo = Repo("/path/to/repo")      # the git dir is found with `git rev-parse`

print(repo.current_branch_name())
print(repo.default_branch())      # e.g. "main", from refs/remotes/origin/HEAD
print(repo.trunk_branches())      # the default branch plus any additional trunks
print(repo.origin().repo_slug)    # e.g. "my-org/my-repo"

result = repo.run(["status", "--short"])
for line in result.lines():
    print(line)
```

`Repo` also takes the git directory explicitly, a `remote` name (used by
`remote_name`, default `origin`) and `additional_trunk_branches`.

A failing `git` invocation raises `GitError`, which carries `stderr` and
`exit_code`. `repo.origin()` raises `RemoteNotFoundError` when there is no
`origin` remote. `parse_git_url` understands both URLs and scp-like
`user@host:path` remotes.

### Commits, refs and history

```python
from avtool.git.catfile import get_refs, parse_commit_contents
from avtool.git.listrefs import list_refs
from avtool.git.log import log, find_closes_pull_request_comments
from avtool.git.revlist import rev_list
from avtool.git.show import commit_info

for ref in list_refs(repo, ["refs/heads/*"]):
    print(ref.name, ref.oid, ref.upstream_status)

commits = log(repo, ["main..feature"])
# Maps PR numbers named by "closes #123"-style keywords to commit hashes.
print(find_closes_pull_request_comments(commits))

print(rev_list(repo, ["main..feature"], reverse=True))
print(commit_info(repo, "HEAD").subject)

item, = get_refs(repo, ["HEAD"])
print(parse_commit_contents(item.contents).message_title())
```

### Cherry-picks, diffs and rebases

```python
from avtool.git.cherrypick import cherry_pick, CherryPickConflictError
from avtool.git.diff import diff
from avtool.git.rebase import rebase_parse, RebaseStatus

try:
    cherry_pick(repo, ["abc1234"], fast_forward=True)
except CherryPickConflictError as exc:
    print("conflict while applying", exc.conflicting_commit)

if not diff(repo, ["main", "feature"], quiet=True).empty:
    print("branches differ")

result = rebase_parse(repo, upstream="main")
if result.status is RebaseStatus.CONFLICT:
    print(result.error_headline)
```

`rebase_parse(repo, continue_=True)`, `abort=True` and `skip=True` resume or
stop a rebase in progress. `normalize_rebase_hint` cleans rebase stderr for
display.

### Working tree status and state files

```python
from avtool.git.status import status
from avtool.git.state_file import StateFileKind, read_state_file, write_state_file

st = status(repo)
if not st.is_clean():
    print("uncommitted changes:", st.unstaged_tracked_files)

repo.av_tmp_dir()                                  # makes sure .git/av exists
write_state_file(repo, StateFileKind.SYNC, {"step": 1})
print(read_state_file(repo, StateFileKind.SYNC))
write_state_file(repo, StateFileKind.SYNC, None)   # removes the file
```

`write_state_file` does not create `.git/av` itself.

## Editing text in the user's editor

```python
from avtool.editor import launch

message = launch(
    repo,
    text="Title\n\n%% Lines starting with %% are removed.\n",
    comment_prefix="%%",
)
```

If no command is given, the editor comes from `git var GIT_EDITOR`, or `vi`
when that fails. The command `:` returns the text unchanged without starting
an editor. A failing editor raises `EditorError`, whose `text` holds what
could still be read back.

## GitHub

```python
import os

from avtool.gh.client import Client, is_http_unauthorized
from avtool.gh.pullrequest import get_pull_requests, PullRequestState
from avtool.gh.queries import get_repository_by_slug, viewer

client = Client(os.environ["GITHUB_TOKEN"])

print(viewer(client).login)
print(get_repository_by_slug(client, "my-org/my-repo").id)

page = get_pull_requests(
    client, "my-org", "my-repo", head_ref_name="feature",
    states=[PullRequestState.OPEN],
)
for pr in page.pull_requests:
    print(pr.number, pr.title, pr.head_branch_name(), pr.merge_commit())
```

Give `base_url` for GitHub Enterprise. The client then posts to
`<base_url>/api/graphql`. API failures raise `GitHubError`; HTTP failures set
its `status`.

## Aviator API authentication check

```python
from avtool.avgql import VIEWER_SELECTION, ViewerSubquery, NotAuthenticatedError

# Embed VIEWER_SELECTION in a query, then check the result's data:
ViewerSubquery.from_dict(data).check_viewer()   # raises NotAuthenticatedError
```

## User state and version checks

```python
from avtool.userstate import load_user_state, save_user_state
from avtool.version import VERSION, fetch_latest_version

state = load_user_state()        # from $XDG_STATE_HOME/av/user-state.json
state.notified_stack_sync_change = True
save_user_state(state)

latest = fetch_latest_version(url="https://example.com/releases/latest")
```

`fetch_latest_version` caches the answer for 24 hours in `~/.cache/av` (or
`cache_dir`). A URL is needed whenever the cache is missing or stale.

## What this package does not do

`avtool` is a library only. It has no command-line program, and it does not
keep metadata about branch stacks or carry out stack operations such as
syncing, restacking or pushing a stack; it provides the git, GitHub and
state-file building blocks such a tool would use.