# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for Scope, tracking views and ScopedStore."""

import pytest

from genro_statetree import (
    MutationEvent,
    MutationMetadata,
    Path,
    Scope,
    ScopedStore,
    StateTree,
    StateTreeError,
    is_node,
    proxiable,
    unwrap,
    untracked,
)
from genro_statetree.scoping import ScopedDict, ScopedList, ScopedNode


@proxiable
@untracked('cache')
class Todo:
    def __init__(self, text):
        self.text = text
        self.active = True
        self.cache = None

    def toggle(self):
        self.active = not self.active

    @property
    def summary(self):
        return f"{self.text} ({'active' if self.active else 'done'})"


def todo_tree():
    return StateTree({'todos': [{'text': 'Do the dishes', 'active': True}], 'filter': 'all'})


def scope_tracks(scoped, node, *links):
    return all(scoped.scope.is_tracking(node, link) for link in links)


class TestScope:
    """Tests for Scope tracking."""

    def test_views_are_cached(self):
        """Test one view is returned per node."""
        tree = todo_tree()
        scope = Scope()
        root = scope.wrap(tree.state)
        todos = root['todos']
        assert isinstance(root, ScopedDict)
        assert isinstance(todos, ScopedList)
        assert root['todos'] is todos
        assert scope.get_or_cache(tree.state) is root

    def test_wrap_scalars(self):
        """Test scalars are returned as-is."""
        scope = Scope()
        assert scope.wrap(1) == 1
        assert scope.wrap('text') == 'text'

    def test_reads_are_tracked(self):
        """Test reading through a view records the link."""
        tree = todo_tree()
        scope = Scope()
        root = scope.wrap(tree.state)
        root['todos'][0]['active']
        assert scope.is_tracking(tree.state, 'todos')
        assert scope.is_tracking(tree.state['todos'], 0)
        assert scope.is_tracking(tree.state['todos'][0], 'active')
        assert not scope.is_tracking(tree.state['todos'][0], 'text')
        assert not scope.is_tracking(tree.state, 'filter')

    def test_reset(self):
        """Test reset forgets every read."""
        tree = todo_tree()
        scope = Scope()
        scope.wrap(tree.state)['filter']
        scope.reset()
        assert not scope.is_tracking(tree.state, 'filter')

    def test_writes_are_tracked(self):
        """Test writing through a view records and forwards the write."""
        tree = todo_tree()
        scope = Scope()
        scope.wrap(tree.state)['filter'] = 'done'
        assert tree.state['filter'] == 'done'
        assert scope.is_tracking(tree.state, 'filter')

    def test_views_unwrap(self):
        """Test views behave as their nodes for helpers."""
        tree = todo_tree()
        view = Scope().wrap(tree.state['todos'])
        assert is_node(view)
        assert unwrap(view) is unwrap(tree.state['todos'])
        assert view == [{'text': 'Do the dishes', 'active': True}]
        assert len(view) == 1

    def test_list_methods_go_through_tree(self):
        """Test list operations on a view mutate the tree."""
        tree = todo_tree()
        view = Scope().wrap(tree.state['todos'])
        view.append({'text': 'Walk the dog', 'active': True})
        assert len(tree.state['todos']) == 2
        assert [item['text'] for item in view] == ['Do the dishes', 'Walk the dog']

    def test_dict_values_and_items(self):
        """Test values and items return views and track keys."""
        tree = StateTree({'a': {'x': 1}, 'b': 2})
        scope = Scope()
        view = scope.wrap(tree.state)
        values = view.values()
        assert isinstance(values[0], ScopedDict)
        assert values[1] == 2
        assert view.items()[1] == ('b', 2)
        assert scope.is_tracking(tree.state, 'a')
        assert scope.is_tracking(tree.state, 'b')


class TestScopedObjects:
    """Tests for views of proxiable objects."""

    def test_attribute_reads(self):
        """Test attribute reads are tracked."""
        tree = StateTree({'todo': Todo('a')})
        scope = Scope()
        todo = scope.wrap(tree.state)['todo']
        assert isinstance(todo, ScopedNode)
        assert todo.text == 'a'
        assert scope.is_tracking(tree.state['todo'], 'text')

    def test_untracked_attributes(self):
        """Test untracked attributes are never recorded."""
        tree = StateTree({'todo': Todo('a')})
        scope = Scope()
        todo = scope.wrap(tree.state)['todo']
        todo.cache
        assert not scope.is_tracking(tree.state['todo'], 'cache')

    def test_properties_track_their_reads(self):
        """Test properties are evaluated against the view."""
        tree = StateTree({'todo': Todo('a')})
        scope = Scope()
        todo = scope.wrap(tree.state)['todo']
        assert todo.summary == 'a (active)'
        node = tree.state['todo']
        assert not scope.is_tracking(node, 'summary')
        assert scope.is_tracking(node, 'text')
        assert scope.is_tracking(node, 'active')

    def test_methods_are_bound_to_view(self):
        """Test methods run against the view and mutate the tree."""
        tree = StateTree({'todo': Todo('a')})
        scope = Scope()
        todo = scope.wrap(tree.state)['todo']
        assert todo.toggle is todo.toggle
        todo.toggle()
        assert tree.state['todo'].active is False
        assert not scope.is_tracking(tree.state['todo'], 'toggle')
        assert scope.is_tracking(tree.state['todo'], 'active')


class TestAffected:
    """Tests for Scope.affected."""

    def event(self, tree, node, operation, props=(), previously_undefined=False):
        return MutationEvent(
            tree.state,
            tree.get_path_for(node),
            MutationMetadata(operation, props, previously_undefined),
        )

    def test_structural_operations_always_affect(self):
        """Test every operation other than 'set' affects the scope."""
        tree = todo_tree()
        scope = Scope()
        for operation in ('delete', 'push', 'reverse', 'merge', 'mutate'):
            assert scope.affected(self.event(tree, tree.state['todos'], operation, ('x',)))

    def test_root_replacement_affects(self):
        """Test replacing the root affects the scope."""
        tree = todo_tree()
        event = MutationEvent(tree.state, Path.root(), MutationMetadata('set'))
        assert Scope().affected(event)

    def test_new_links_affect(self):
        """Test setting a previously undefined link affects the scope."""
        tree = todo_tree()
        event = self.event(tree, tree.state, 'set', ('new',), True)
        assert Scope().affected(event)

    def test_untracked_node(self):
        """Test setting links of an unread node does not affect the scope."""
        tree = todo_tree()
        event = self.event(tree, tree.state['todos'][0], 'set', ('text',))
        assert not Scope().affected(event)

    def test_tracked_links(self):
        """Test only tracked links of the mutated node affect the scope."""
        tree = todo_tree()
        scope = Scope()
        scope.wrap(tree.state)['todos'][0]['active']
        todo = tree.state['todos'][0]
        assert scope.affected(self.event(tree, todo, 'set', ('active',)))
        assert not scope.affected(self.event(tree, todo, 'set', ('text',)))

    def test_root_links(self):
        """Test sets at the root path use the root seed."""
        tree = todo_tree()
        scope = Scope()
        scope.wrap(tree.state)['filter']
        assert scope.affected(self.event(tree, tree.state, 'set', ('filter',)))
        assert not scope.affected(self.event(tree, tree.state, 'set', ('todos',)))


class TestScopedStore:
    """Tests for ScopedStore."""

    def test_dependency_tracking_scenario(self):
        """Test only mutations of read data notify scoped subscribers."""
        tree = todo_tree()
        scoped = ScopedStore(tree)
        events = []
        scoped.subscribe(events.append)

        scoped.state['todos'][0]['active']

        tree.state['todos'][0]['text'] = 'Walk the dog'
        assert events == []

        tree.state['todos'][0]['active'] = False
        assert len(events) == 1

    def test_structural_mutations_notify(self):
        """Test structural mutations always notify."""
        tree = todo_tree()
        scoped = ScopedStore(tree)
        events = []
        scoped.subscribe(events.append)
        tree.state['todos'].append({'text': 'b', 'active': True})
        assert len(events) == 1

    def test_state_follows_current_tree(self):
        """Test state returns a view of the current target node."""
        tree = todo_tree()
        scoped = ScopedStore(tree)
        tree.state['filter'] = 'done'
        assert scoped.state['filter'] == 'done'
        assert unwrap(scoped.state) is unwrap(tree.state)

    def test_scoped_to_node(self):
        """Test a scoped store can target a subtree."""
        tree = todo_tree()
        scoped = ScopedStore(tree.state['todos'])
        events = []
        scoped.subscribe(events.append)
        scoped.state[0]['active']
        tree.state['filter'] = 'done'
        tree.state['todos'][0]['text'] = 'b'
        assert events == []
        tree.state['todos'][0]['active'] = False
        assert len(events) == 1

    def test_set_state(self):
        """Test set_state replaces the target node's value."""
        tree = todo_tree()
        scoped = ScopedStore(tree.state['todos'])
        view = scoped.set_state([{'text': 'new', 'active': False}])
        assert isinstance(view, ScopedList)
        assert tree.state['todos'] == [{'text': 'new', 'active': False}]
        assert scoped.state[0]['text'] == 'new'

    def test_subscribe_to(self):
        """Test subscribing to a specific node through the scope."""
        tree = todo_tree()
        scoped = ScopedStore(tree)
        events = []
        scoped.subscribe_to(tree.state['todos'][0], events.append)
        scoped.state['todos'][0]['text']
        tree.state['todos'][0]['text'] = 'b'
        assert len(events) == 1

    def test_invalid_target(self):
        """Test scoped stores need a tree or a node."""
        with pytest.raises(StateTreeError, match="either a StateTree"):
            ScopedStore({'a': 1})

    def test_store_follows_replaced_root(self):
        """Test a store targeting the tree keeps working after set_state."""
        tree = StateTree({'count': 0})
        scoped = ScopedStore(tree)
        events = []
        scoped.subscribe(events.append)
        tree.set_state({'count': 5})
        assert scoped.state['count'] == 5
        assert len(events) == 1
        tree.state['count'] = 6
        assert len(events) == 2
        assert scoped.state['count'] == 6

    def test_root_node_target_follows_replaced_root(self):
        """Test a store built from the root node follows set_state."""
        tree = StateTree({'count': 0})
        scoped = ScopedStore(tree.state)
        tree.set_state({'count': 1})
        assert scoped.state['count'] == 1
        view = scoped.set_state({'count': 2})
        assert view['count'] == 2
        assert unwrap(tree.state) == {'count': 2}


class TestWholeValueReads:
    """Tests for reads comparing whole values through a view."""

    def scoped_tags(self):
        tree = StateTree({'tags': ['home', 'work'], 'filter': 'all'})
        scoped = ScopedStore(tree)
        events = []
        scoped.subscribe(events.append)
        return tree, scoped, events

    def test_unread_items_do_not_notify(self):
        """Test reading only the list does not record its items."""
        tree, scoped, events = self.scoped_tags()
        len(scoped.state['tags'])
        tree.state['tags'][1] = 'travel'
        assert events == []

    def test_membership_records_items(self):
        """Test membership checks record every item of the list."""
        tree, scoped, events = self.scoped_tags()
        assert 'work' in scoped.state['tags']
        assert scope_tracks(scoped, tree.state['tags'], 0, 1)
        tree.state['tags'][1] = 'travel'
        assert len(events) == 1

    def test_index_records_items(self):
        """Test index records every item of the list."""
        tree, scoped, events = self.scoped_tags()
        assert scoped.state['tags'].index('work') == 1
        tree.state['tags'][0] = 'travel'
        assert len(events) == 1

    def test_index_missing_value(self):
        """Test index still raises ValueError for missing values."""
        tree, scoped, events = self.scoped_tags()
        with pytest.raises(ValueError):
            scoped.state['tags'].index('travel')
        assert scope_tracks(scoped, tree.state['tags'], 0, 1)

    def test_count_records_items(self):
        """Test count records every item of the list."""
        tree, scoped, events = self.scoped_tags()
        assert scoped.state['tags'].count('home') == 1
        tree.state['tags'][0] = 'work'
        assert len(events) == 1

    def test_equality_records_links(self):
        """Test comparing a view records every link of its node."""
        tree, scoped, events = self.scoped_tags()
        assert scoped.state['tags'] == ['home', 'work']
        tree.state['tags'][1] = 'travel'
        assert len(events) == 1

    def test_deep_equality_records_descendants(self):
        """Test comparing a view records the links of nested nodes."""
        tree = todo_tree()
        scoped = ScopedStore(tree)
        events = []
        scoped.subscribe(events.append)
        assert scoped.state['todos'] == [{'text': 'Do the dishes', 'active': True}]
        tree.state['filter'] = 'done'
        assert events == []
        tree.state['todos'][0]['text'] = 'Walk the dog'
        assert len(events) == 1

    def test_untracked_links_are_skipped(self):
        """Test whole value reads skip untracked attributes."""
        tree = StateTree({'todo': Todo('a')})
        scope = Scope()
        todo = scope.wrap(tree.state)['todo']
        assert todo == tree.state['todo']
        node = tree.state['todo']
        assert scope.is_tracking(node, 'text')
        assert scope.is_tracking(node, 'active')
        assert not scope.is_tracking(node, 'cache')
