"""Filesystem operations used while moving a data directory."""

import collections
import os
import os.path
import re
import shlex
import shutil

import batou.utils

PathStat = collections.namedtuple("PathStat", ["exists", "is_dir"])


class FileSystem:
    def stat(self, path):
        if not path:
            return PathStat(False, False)
        return PathStat(os.path.lexists(path), os.path.isdir(path))

    def copy_recursive_preserve(self, source, target):
        """Copy the contents of `source` into `target` like `cp -a`.

        Modes and timestamps are copied by shutil, ownership is applied
        afterwards from the source entries.
        """
        shutil.copytree(source, target, symlinks=True, dirs_exist_ok=True)
        for dirpath, dirnames, filenames in os.walk(source):
            relative = os.path.relpath(dirpath, source)
            for name in [os.curdir] + dirnames + filenames:
                src = os.path.normpath(os.path.join(dirpath, name))
                dst = os.path.normpath(os.path.join(target, relative, name))
                st = os.lstat(src)
                os.lchown(dst, st.st_uid, st.st_gid)

    def remove(self, path):
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        elif os.path.lexists(path):
            os.remove(path)

    def set_owner_group(self, path, owner, group, recursive=False):
        batou.utils.cmd(
            "chown {}{}:{} {}".format(
                "-R " if recursive else "",
                shlex.quote(owner),
                shlex.quote(group),
                shlex.quote(path),
            )
        )

    def set_mode(self, path, mode, recursive=False):
        batou.utils.cmd(
            "chmod {}{} {}".format(
                "-R " if recursive else "",
                shlex.quote(mode),
                shlex.quote(path),
            )
        )

    def replace_text_in_file(self, path, pattern, replacement):
        """Replace every match of `pattern` with the literal `replacement`.

        Returns whether the file content changed.
        """
        with open(path, "r") as f:
            content = f.read()
        patched = re.sub(
            pattern, lambda m: replacement, content, flags=re.MULTILINE
        )
        if patched == content:
            return False
        with open(path, "w") as f:
            f.write(patched)
        return True

    def ensure_line(self, path, line, match_pattern, anchor):
        """Make sure `line` is present in the file at `path`.

        The last line matching `match_pattern` is replaced. Without such a
        line, `line` is inserted before the last line matching `anchor` or
        appended at the end. Returns whether the file content changed.
        """
        with open(path, "r") as f:
            lines = f.read().splitlines()

        matches = [
            i for i, l in enumerate(lines) if re.search(match_pattern, l)
        ]
        if matches:
            if lines[matches[-1]] == line:
                return False
            lines[matches[-1]] = line
        else:
            anchors = [i for i, l in enumerate(lines) if re.search(anchor, l)]
            if anchors:
                lines.insert(anchors[-1], line)
            else:
                lines.append(line)

        with open(path, "w") as f:
            f.write("\n".join(lines) + "\n")
        return True
