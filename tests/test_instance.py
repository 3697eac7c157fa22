from dupfind.instance import InstanceFlag


def test_not_running_initially(tmp_path):
    assert InstanceFlag(tmp_path / "gui.lock").is_running() is False


def test_acquire_marks_running(tmp_path):
    path = tmp_path / "gui.lock"
    owner = InstanceFlag(path)
    observer = InstanceFlag(path)
    assert owner.acquire() is True
    assert owner.held is True
    assert observer.is_running() is True
    assert owner.is_running() is True
    owner.release()
    assert observer.is_running() is False


def test_second_acquire_fails_while_held(tmp_path):
    path = tmp_path / "gui.lock"
    owner = InstanceFlag(path)
    other = InstanceFlag(path)
    assert owner.acquire() is True
    assert other.acquire() is False
    owner.release()
    assert other.acquire() is True
    other.release()


def test_acquire_creates_parent(tmp_path):
    path = tmp_path / "deep" / "dir" / "gui.lock"
    flag = InstanceFlag(path)
    assert flag.acquire() is True
    assert path.parent.is_dir()
    flag.release()


def test_context_manager(tmp_path):
    path = tmp_path / "gui.lock"
    observer = InstanceFlag(path)
    with InstanceFlag(path) as flag:
        assert flag.held is True
        assert observer.is_running() is True
    assert observer.is_running() is False