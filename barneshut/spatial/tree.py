import logging

import numpy as np
import plotly.graph_objects as go
import matplotlib.pyplot as plt

from ..bodies import check_arrays, snapshot
from ..config import BhConfig
from .cube import Cube
from .kernels import center_of_mass, octant_indices

logger = logging.getLogger(__name__)

# Below this distance a node's center of mass is treated as coincident with
# the query point.
MIN_DISTANCE = 1e-12


class Node:
    '''
    One cubical region of the tree and the bodies it contains.

    Mass, center of mass and body_ids include all bodies of the subtree.
    `id` equals the node's index in `Tree.nodes` once the tree is built,
    and `children` holds indices into that same list.
    '''

    def __init__(self, id, cube, mass, center_of_mass, body_ids, depth=0, parent=None):
        self.id = id
        self.cube = cube
        self.children = []
        self.mass = mass
        self.center_of_mass = center_of_mass
        self.body_ids = body_ids
        self.depth = depth
        self.parent = parent

    def is_leaf(self):
        '''True if the node has no children.'''
        return len(self.children) == 0

    @property
    def width(self):
        return self.cube.width

    def __repr__(self):
        return f"Id: {self.id}, Width: {self.cube.width:.3f}, Ch: {self.children}"


class Tree:
    '''
    Octree over a snapshot of bodies, stored as a flat list of nodes.

    Node 0 is the root. Build a fresh tree every time step; once built it
    is only read, so it can be shared by concurrent evaluations.

    Usage:
        tree = Tree()
        tree.build(positions, masses, cube, config)
        nodes = tree.leaves(positions[0], config, exclude_id=0)
    '''

    def __init__(self):
        self.nodes = []
        self.cube = None
        self.dropped_bodies = 0

    def __len__(self):
        return len(self.nodes)

    def __iter__(self):
        return iter(self.nodes)

    def __getitem__(self, i):
        return self.nodes[i]

    @property
    def root(self):
        return self.nodes[0] if self.nodes else None

    def build(self, qs, masses, cube=None, config=None):
        '''
        Build the tree structure from body positions.

        Branches until each node holds `max_bodies_per_node` bodies or
        fewer, or `max_tree_depth` is reached. Uses an explicit work list
        rather than recursion.

        Parameters
        ----------
        qs : array_like
            Positions of bodies. Shape (N, 3). Body i has identity i.
        masses : array_like
            Masses (or charges) of bodies. Shape (N,).
        cube : Cube, optional
            Root extent. Derived from `qs` when omitted.
        config : BhConfig, optional
            Defaults to BhConfig().

        Returns
        -------
        Tree
            self, for chaining.
        '''
        config = config or BhConfig()
        qs, masses = check_arrays(qs, masses)
        if cube is None:
            cube = Cube.from_positions(qs)

        self.nodes = []
        self.cube = cube
        self.dropped_bodies = 0
        if len(qs) == 0:
            return self

        nodes = self.nodes
        # Work list entries: (body ids, cube, parent id, depth).
        stack = [(np.arange(len(qs)), cube, None, 0)]

        while stack:
            ids, cube_, parent_id, depth = stack.pop()
            com, mass = center_of_mass(qs[ids], masses[ids])

            node_id = len(nodes)
            nodes.append(Node(node_id, cube_, mass, com, frozenset(ids.tolist()), depth, parent_id))
            if parent_id is not None:
                nodes[parent_id].children.append(node_id)

            if len(ids) <= config.max_bodies_per_node:
                continue
            if depth >= config.max_tree_depth:
                # Subdivision would exceed the depth limit: keep these bodies
                # together in this terminal node.
                self.dropped_bodies += len(ids)
                continue

            octants = octant_indices(qs[ids], cube_.center)
            for k, octant_cube in enumerate(cube_.divide_into_octants()):
                ids_k = ids[octants == k]
                if len(ids_k):
                    stack.append((ids_k, octant_cube, node_id, depth + 1))

        nodes.sort(key=lambda n: n.id)

        if self.dropped_bodies:
            logger.warning(
                "%d bodies left unresolved at max_tree_depth=%d",
                self.dropped_bodies, config.max_tree_depth,
            )
        logger.debug(
            "Built tree with %d nodes for %d bodies (max depth %d)",
            len(nodes), len(qs), max(n.depth for n in nodes),
        )
        return self

    def leaves(self, posit_target, config=None, exclude_id=None):
        '''
        Nodes needed to approximate all influences on a target position.

        A node without children is always accepted. Otherwise it is
        accepted when width / distance to its center of mass < theta, and
        opened when it is too close.

        Parameters
        ----------
        posit_target : array_like
            Query position, shape (3,).
        config : BhConfig, optional
            Only `theta` is used here.
        exclude_id : int, optional
            Identity of the body at the query point. A node containing it is
            never accepted: an internal one is opened, a terminal one skipped.

        Returns
        -------
        list of Node
        '''
        config = config or BhConfig()
        result = []
        if not self.nodes:
            return result

        target = np.asarray(posit_target, dtype=np.float64)
        nodes = self.nodes
        stack = [0]
        while stack:
            node = nodes[stack.pop()]
            excluded = exclude_id is not None and exclude_id in node.body_ids

            if node.is_leaf():
                if not excluded:
                    result.append(node)
                continue

            if not excluded:
                r_vec = node.center_of_mass - target
                dist = np.sqrt(np.dot(r_vec, r_vec))
                if dist > MIN_DISTANCE and node.cube.width / dist < config.theta:
                    result.append(node)
                    continue
            # The source is near; go deeper.
            stack.extend(node.children)

        return result

    def plot(self, projection='3D', data=None, show=True):
        '''
        Plot the terminal nodes of the tree and optionally body positions.

        Parameters
        ----------
        projection : str, optional
            '3D' for an interactive plotly figure, '2D' for a matplotlib
            x-y projection. Default is '3D'.
        data : array_like, optional
            Positions of bodies to scatter, shape (N, 3).
        show : bool, optional
            Display the figure. Default is True.

        Returns
        -------
        fig : plotly.graph_objects.Figure or matplotlib.figure.Figure
        '''
        leaves = [node for node in self.nodes if node.is_leaf()]
        if data is not None:
            data = np.asarray(data, dtype=np.float64)

        if projection == '2D':
            fig, ax = plt.subplots(figsize=(6, 6))
            for node in leaves:
                mins, maxs = node.cube.bounds()
                x_coords = [mins[0], maxs[0], maxs[0], mins[0], mins[0]]
                y_coords = [mins[1], mins[1], maxs[1], maxs[1], mins[1]]
                ax.plot(x_coords, y_coords, 'r-', lw=1, alpha=0.5)
            if data is not None:
                ax.scatter(data[:, 0], data[:, 1], s=20)
            ax.set_aspect('equal')
            ax.set_xlabel('x')
            ax.set_ylabel('y')
            if show:
                plt.show()
            return fig

        elif projection == '3D':
            if data is None:
                data = np.empty((0, 3))
            particle_trace = go.Scatter3d(
                x=data[:, 0],
                y=data[:, 1],
                z=data[:, 2],
                mode='markers',
                marker=dict(size=5, color='blue'),
                name='Bodies'
            )

            all_edges_x, all_edges_y, all_edges_z = [], [], []
            for node in leaves:
                edges_x, edges_y, edges_z = _cube_edges(node.cube)
                all_edges_x.extend(edges_x)
                all_edges_y.extend(edges_y)
                all_edges_z.extend(edges_z)

            tree_trace = go.Scatter3d(
                x=all_edges_x,
                y=all_edges_y,
                z=all_edges_z,
                mode='lines',
                line=dict(color='red', width=2),
                name='Tree Structure'
            )

            fig = go.Figure(data=[particle_trace, tree_trace])
            fig.update_layout(
                title='3D Tree Visualization',
                scene=dict(
                    xaxis_title='X',
                    yaxis_title='Y',
                    zaxis_title='Z'
                ),
                width=800,
                height=800
            )
            if show:
                fig.show()
            return fig

        raise ValueError(f"projection must be '2D' or '3D', got {projection!r}")


def _cube_edges(cube):
    '''The 12 edges of a cube as x, y, z coordinate lists separated by None.'''
    mins, maxs = cube.bounds()
    x = [mins[0], maxs[0]]
    y = [mins[1], maxs[1]]
    z = [mins[2], maxs[2]]

    edges = [
        # Bottom face
        [(x[0],y[0],z[0]), (x[1],y[0],z[0])],
        [(x[1],y[0],z[0]), (x[1],y[1],z[0])],
        [(x[1],y[1],z[0]), (x[0],y[1],z[0])],
        [(x[0],y[1],z[0]), (x[0],y[0],z[0])],
        # Top face
        [(x[0],y[0],z[1]), (x[1],y[0],z[1])],
        [(x[1],y[0],z[1]), (x[1],y[1],z[1])],
        [(x[1],y[1],z[1]), (x[0],y[1],z[1])],
        [(x[0],y[1],z[1]), (x[0],y[0],z[1])],
        # Vertical edges
        [(x[0],y[0],z[0]), (x[0],y[0],z[1])],
        [(x[1],y[0],z[0]), (x[1],y[0],z[1])],
        [(x[1],y[1],z[0]), (x[1],y[1],z[1])],
        [(x[0],y[1],z[0]), (x[0],y[1],z[1])]
    ]

    edges_x, edges_y, edges_z = [], [], []
    for edge in edges:
        edges_x.extend([edge[0][0], edge[1][0], None])
        edges_y.extend([edge[0][1], edge[1][1], None])
        edges_z.extend([edge[0][2], edge[1][2], None])
    return edges_x, edges_y, edges_z


def build_tree(bodies, cube, config=None):
    '''
    Build a tree from caller-owned bodies.

    Parameters
    ----------
    bodies : sequence of BodyModel
        Body i in this sequence gets identity i.
    cube : Cube
        Root extent, usually from `Cube.from_bodies`.
    config : BhConfig, optional

    Returns
    -------
    Tree
    '''
    qs, masses = snapshot(bodies)
    return Tree().build(qs, masses, cube, config)
