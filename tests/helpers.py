"""Shared test helpers."""


def commit_files(repo, message, files):
    """Write, stage and commit ``files`` (path -> text). Returns the commit id."""
    for path, content in files.items():
        repo.worktree.write(path, content.encode())
        repo.add(path)
    return repo.commit(message)
